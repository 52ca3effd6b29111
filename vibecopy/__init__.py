"""Vibe Copy - restyle a photo after a reference image with Gemini.

This package provides a Flet wizard that takes a source photo and a style
reference, lets the user choose which attribute to copy, and asks a Gemini
image model for the composite.

Modules:
    models: Immutable wizard state, image references and sample assets.
    prompts: Mimicry mode to editing instruction mapping.
    encoding: Inline data URL encoding of local and remote images.
    generation: Gemini image-editing client.
    flow: The wizard state machine and generation lifecycle.
    ui: Flet views.

Example:
    >>> import flet as ft
    >>> from vibecopy.ui import main
    >>> ft.app(target=main)
"""

from vibecopy.config import DEFAULT_MODEL, ProviderConfig, load_provider_config
from vibecopy.encoding import ImageEncoder, generate_filename, save_data_url, to_data_url
from vibecopy.errors import (
    ConfigurationError,
    ImageDataMissingError,
    ImageFetchError,
    VibeCopyError,
)
from vibecopy.flow import FlowController, StatusRotation
from vibecopy.generation import GenerationClient
from vibecopy.models import (
    RESULT_BATCH_SIZE,
    SAMPLE_REFERENCES,
    SAMPLE_SOURCES,
    STATUS_MESSAGES,
    AppStep,
    FlowState,
    GenerationResult,
    ImageReference,
    MimicMode,
    sample_reference,
)
from vibecopy.prompts import MODE_INSTRUCTIONS, build_instruction

__all__ = [
    # Constants
    "DEFAULT_MODEL",
    "RESULT_BATCH_SIZE",
    "STATUS_MESSAGES",
    "SAMPLE_SOURCES",
    "SAMPLE_REFERENCES",
    "MODE_INSTRUCTIONS",
    # Data classes
    "AppStep",
    "MimicMode",
    "ImageReference",
    "GenerationResult",
    "FlowState",
    "ProviderConfig",
    # Classes
    "ImageEncoder",
    "GenerationClient",
    "FlowController",
    "StatusRotation",
    # Errors
    "VibeCopyError",
    "ConfigurationError",
    "ImageDataMissingError",
    "ImageFetchError",
    # Functions
    "build_instruction",
    "load_provider_config",
    "sample_reference",
    "to_data_url",
    "save_data_url",
    "generate_filename",
]

__version__ = "0.1.0"
