"""Provider configuration, built once at process start."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from vibecopy.errors import ConfigurationError

API_KEY_ENV: str = "GEMINI_API_KEY"
"""Environment variable holding the provider credential."""

DEFAULT_MODEL: str = "gemini-2.5-flash-image"
"""Gemini model used for image editing."""

DEFAULT_TIMEOUT_MS: int = 300_000


@dataclass(frozen=True)
class ProviderConfig:
    """Settings for the generation provider client.

    Attributes:
        api_key: Gemini API key.
        model: Model identifier passed to ``generate_content``.
        timeout_ms: HTTP timeout for provider calls, in milliseconds.
    """

    api_key: str
    model: str = DEFAULT_MODEL
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __repr__(self) -> str:
        return f"ProviderConfig(api_key='***', model={self.model!r}, timeout_ms={self.timeout_ms})"


def load_provider_config(environ: Optional[Mapping[str, str]] = None) -> ProviderConfig:
    """Read the provider credential from the environment.

    A ``.env`` file in the working directory is loaded first when reading
    from the process environment.

    Args:
        environ: Mapping to read from instead of ``os.environ``.

    Raises:
        ConfigurationError: If no credential is set.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    api_key = (environ.get(API_KEY_ENV) or "").strip()
    if not api_key:
        raise ConfigurationError(f"{API_KEY_ENV} not set in environment or .env file")
    return ProviderConfig(api_key=api_key)
