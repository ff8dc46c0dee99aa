"""
Utility modules for ImageSlim.
"""

from .metrics import (
    image_mse,
    image_psnr,
    max_abs_error,
    relative_error,
    frobenius_distance,
    evaluate_compression_quality,
    create_compression_report
)

from .io import (
    load_image,
    save_image,
    resolve_format,
    ConfigurationManager
)

__all__ = [
    # Quality metrics
    'image_mse',
    'image_psnr',
    'max_abs_error',
    'relative_error',
    'frobenius_distance',
    'evaluate_compression_quality',
    'create_compression_report',

    # I/O utilities
    'load_image',
    'save_image',
    'resolve_format',
    'ConfigurationManager'
]
