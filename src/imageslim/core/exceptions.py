"""
Error types raised by the ImageSlim compression pipeline.

Every error carries the pipeline stage that produced it so callers can tell
a bad configuration from a bad image or a numeric failure.
"""

from typing import Optional


class ImageSlimError(Exception):
    """Base class for all ImageSlim errors."""

    stage = "compression"


class InvalidCompressionLevel(ImageSlimError, ValueError):
    """Compression level outside the supported 0-9 range."""

    stage = "configuration"

    def __init__(self, level):
        self.level = level
        super().__init__(f"Compression level must be an integer in [0, 9], got {level!r}")


class InvalidImageDimensions(ImageSlimError, ValueError):
    """Image with zero width/height or an unsupported channel layout."""

    stage = "extraction"


class InvalidImageData(ImageSlimError, ValueError):
    """Pixel data that cannot be read as 8-bit intensities."""

    stage = "extraction"


class DecompositionError(ImageSlimError, RuntimeError):
    """
    SVD of a channel matrix failed.

    Raised for non-finite input and for failures of the numeric backend
    (e.g. non-convergence).
    """

    stage = "decomposition"

    def __init__(self, message: str, channel: Optional[str] = None):
        self.channel = channel
        if channel is not None:
            message = f"{message} (channel: {channel})"
        super().__init__(message)
