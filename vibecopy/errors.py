"""Exceptions raised by the Vibe Copy core."""


class VibeCopyError(Exception):
    """Base class for all Vibe Copy errors."""


class ConfigurationError(VibeCopyError):
    """Raised when the provider configuration cannot be built."""


class ImageDataMissingError(VibeCopyError):
    """Raised when a required image has no encodable payload."""


class ImageFetchError(ImageDataMissingError):
    """Raised when a remote image cannot be fetched or is not an image."""
