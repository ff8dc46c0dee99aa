"""
ImageSlim: lossy image compression with truncated SVD.

Each color channel is replaced by its best low-rank approximation; a
compression level from 0 (none) to 9 (maximum) picks the rank.

Example usage:
    >>> from imageslim import compress_image, load_image, save_image
    >>>
    >>> image = load_image('photo.png')
    >>> compressed = compress_image(image, level=5)
    >>> save_image(compressed, 'photo_c5.jpg')
"""

__version__ = "0.1.0"

# Core compression functionality
from .core import (
    # Errors
    ImageSlimError,
    InvalidCompressionLevel,
    InvalidImageDimensions,
    InvalidImageData,
    DecompositionError,

    # Pipeline stages
    extract_channels,
    assemble_pixels,
    validate_level,
    select_rank,
    Decomposition,
    Decomposer,
    decompose,
    reconstruct,

    # Image compression
    ImageSlim,
    compress_image,
    analyze_levels
)

# Utility functions
from .utils import (
    # Quality metrics
    image_mse,
    image_psnr,
    evaluate_compression_quality,
    create_compression_report,

    # I/O utilities
    load_image,
    save_image,
    ConfigurationManager
)

# Define public API
__all__ = [
    'ImageSlimError',
    'InvalidCompressionLevel',
    'InvalidImageDimensions',
    'InvalidImageData',
    'DecompositionError',
    'extract_channels',
    'assemble_pixels',
    'validate_level',
    'select_rank',
    'Decomposition',
    'Decomposer',
    'decompose',
    'reconstruct',
    'ImageSlim',
    'compress_image',
    'analyze_levels',
    'image_mse',
    'image_psnr',
    'evaluate_compression_quality',
    'create_compression_report',
    'load_image',
    'save_image',
    'ConfigurationManager',
]


def get_version() -> str:
    """Get ImageSlim version."""
    return __version__


# Configure logging
import logging

logger = logging.getLogger(__name__)

# Set up default logging configuration
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        '[%(asctime)s] %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
