"""
Conversion between 8-bit images and normalized channel matrices.

Images are ``uint8`` arrays of shape ``(height, width)`` (grayscale) or
``(height, width, C)`` with ``C`` of 3 (RGB) or 4 (RGBA). Each color channel
becomes a ``float64`` tensor with values in ``[0, 1]``; alpha is never
compressed and travels alongside the matrices untouched.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import logging

import numpy as np
import torch
from torch import Tensor

from .exceptions import InvalidImageData, InvalidImageDimensions

logger = logging.getLogger(__name__)

MAX_INTENSITY = 255.0

RGB_CHANNELS = ("red", "green", "blue")
GRAY_CHANNELS = ("gray",)


@dataclass
class ExtractedChannels:
    """
    Normalized color planes of one image.

    Attributes:
        matrices: One ``(height, width)`` float64 tensor per color channel
        names: Channel names, aligned with ``matrices``
        alpha: Untouched alpha plane, or None if the image has none
    """

    matrices: List[Tensor]
    names: Tuple[str, ...]
    alpha: Optional[np.ndarray] = None

    @property
    def shape(self) -> Tuple[int, int]:
        return tuple(self.matrices[0].shape)

    @property
    def max_rank(self) -> int:
        return min(self.shape)


def _check_image(array: np.ndarray) -> None:
    if array.ndim == 2:
        pass
    elif array.ndim == 3 and array.shape[2] in (3, 4):
        pass
    else:
        raise InvalidImageDimensions(
            f"Expected an image of shape (H, W), (H, W, 3) or (H, W, 4), got {array.shape}"
        )

    height, width = array.shape[:2]
    if height == 0 or width == 0:
        raise InvalidImageDimensions(f"Image has zero width or height: {width}x{height}")

    if array.dtype == np.bool_ or not np.issubdtype(array.dtype, np.integer):
        raise InvalidImageData(f"Expected integer pixel intensities, got dtype {array.dtype}")
    if array.min() < 0 or array.max() > 255:
        raise InvalidImageData(
            f"Pixel intensities must lie in [0, 255], got [{array.min()}, {array.max()}]"
        )


def extract_channels(image) -> ExtractedChannels:
    """
    Split an image into normalized channel matrices.

    Args:
        image: ``uint8`` array (or anything ``numpy.asarray`` accepts, such as
            a Pillow image) of shape (H, W), (H, W, 3) or (H, W, 4)

    Returns:
        ExtractedChannels with entry ``(y, x)`` of each matrix equal to
        ``intensity / 255``

    Raises:
        InvalidImageDimensions: Zero width/height or unsupported layout
        InvalidImageData: Non-integer data or intensities outside [0, 255]
    """
    array = np.asarray(image)
    _check_image(array)

    if array.ndim == 2:
        planes = [array]
        names = GRAY_CHANNELS
        alpha = None
    else:
        planes = [array[:, :, i] for i in range(3)]
        names = RGB_CHANNELS
        alpha = array[:, :, 3].astype(np.uint8) if array.shape[2] == 4 else None

    matrices = [
        torch.from_numpy(plane.astype(np.float64) / MAX_INTENSITY)
        for plane in planes
    ]

    logger.debug(
        f"Extracted {len(matrices)} channel(s) of shape {array.shape[:2]}"
        f"{' with alpha' if alpha is not None else ''}"
    )
    return ExtractedChannels(matrices=matrices, names=names, alpha=alpha)


def assemble_pixels(
    matrices: Sequence[Tensor],
    alpha: Optional[np.ndarray] = None,
    add_alpha: bool = False
) -> np.ndarray:
    """
    Quantize reconstructed channel matrices back into an 8-bit image.

    Each value is clamped to ``[0, 1]``, scaled by 255 and rounded to the
    nearest integer (ties to even). Channels are quantized independently.

    Args:
        matrices: Reconstructed (H, W) matrices, one per color channel
        alpha: Alpha plane to pass through unchanged
        add_alpha: Emit an opaque alpha plane when ``alpha`` is None

    Returns:
        ``uint8`` array of shape (H, W) for a single channel without alpha,
        otherwise (H, W, C)
    """
    if len(matrices) == 0:
        raise ValueError("At least one channel matrix is required")

    shape = tuple(matrices[0].shape)
    planes = []
    for matrix in matrices:
        matrix = torch.as_tensor(matrix)
        if tuple(matrix.shape) != shape:
            raise ValueError(f"Channel shapes don't match: {shape} vs {tuple(matrix.shape)}")

        values = matrix.detach().cpu().to(torch.float64).clamp(0.0, 1.0) * MAX_INTENSITY
        planes.append(torch.round(values).to(torch.uint8).numpy())

    if alpha is not None:
        alpha = np.asarray(alpha, dtype=np.uint8)
        if alpha.shape != shape:
            raise ValueError(f"Alpha shape {alpha.shape} doesn't match channel shape {shape}")
        planes.append(alpha)
    elif add_alpha:
        planes.append(np.full(shape, 255, dtype=np.uint8))

    if len(planes) == 1:
        return planes[0]
    return np.stack(planes, axis=2)
