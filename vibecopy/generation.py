"""Gemini image-editing client.

Wraps the ``google-genai`` async surface behind one call: two inline images
and an instruction go in, one inline image (or nothing) comes out.
"""

import base64
import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from vibecopy.config import ProviderConfig
from vibecopy.encoding import decode_data_url, to_data_url

logger = logging.getLogger(__name__)

RESPONSE_MODALITIES = ["TEXT", "IMAGE"]


def _image_part(data_url: str) -> types.Part:
    mime_type, data = decode_data_url(data_url)
    return types.Part.from_bytes(data=data, mime_type=mime_type)


def extract_image_data_url(response: Any) -> Optional[str]:
    """Return the first inline image of a response as a data URL.

    Args:
        response: A ``GenerateContentResponse`` (or anything shaped like one).

    Returns:
        The image as a data URL, or None if no part carries inline data.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline_data = getattr(part, "inline_data", None)
        if inline_data is None or not inline_data.data:
            continue
        data = inline_data.data
        if isinstance(data, str):
            data = base64.b64decode(data)
        return to_data_url(data, inline_data.mime_type or "image/png")
    return None


class GenerationClient:
    """Long-lived wrapper around the Gemini client.

    Attributes:
        config: Provider settings the client was built from.
        client: The underlying ``genai.Client``.

    Example:
        >>> client = GenerationClient(load_provider_config())
        >>> image = await client.generate(source, reference, instruction)
    """

    def __init__(self, config: ProviderConfig, client: Optional[Any] = None) -> None:
        """Build the client from ``config``.

        Args:
            config: Provider settings.
            client: Pre-built SDK client. When None a ``genai.Client`` is
                created from ``config``.
        """
        self.config = config
        if client is None:
            client = genai.Client(
                api_key=config.api_key,
                http_options=types.HttpOptions(timeout=config.timeout_ms),
            )
        self.client = client
        logger.info("Generation client ready (model=%s)", config.model)

    async def generate(self, source_image: str, reference_image: str, instruction: str) -> Optional[str]:
        """Ask the provider to edit ``source_image`` after ``reference_image``.

        Args:
            source_image: Data URL of the user's photo (image 1).
            reference_image: Data URL of the style reference (image 2).
            instruction: Editing instruction from the prompt builder.

        Returns:
            The generated image as a data URL, or None if the response
            carried no image.

        Raises:
            Exception: Provider transport and auth errors are not caught.
        """
        contents = [
            _image_part(source_image),
            _image_part(reference_image),
            types.Part.from_text(text=instruction),
        ]
        response = await self.client.aio.models.generate_content(
            model=self.config.model,
            contents=contents,
            config=types.GenerateContentConfig(response_modalities=RESPONSE_MODALITIES),
        )
        image = extract_image_data_url(response)
        if image is None:
            logger.warning("No image data returned by %s", self.config.model)
        return image
