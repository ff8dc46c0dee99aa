"""
Core compression algorithms for ImageSlim.
"""

from .exceptions import (
    ImageSlimError,
    InvalidCompressionLevel,
    InvalidImageDimensions,
    InvalidImageData,
    DecompositionError
)

from .channels import (
    ExtractedChannels,
    extract_channels,
    assemble_pixels
)

from .rank import (
    validate_level,
    select_rank,
    storage_ratio
)

from .svd import (
    SVDBackend,
    TorchSVDBackend,
    NumpySVDBackend,
    get_backend,
    Decomposition,
    Decomposer,
    decompose,
    reconstruct
)

from .compression import (
    ImageSlim,
    compress_image,
    analyze_levels
)

__all__ = [
    # Errors
    'ImageSlimError',
    'InvalidCompressionLevel',
    'InvalidImageDimensions',
    'InvalidImageData',
    'DecompositionError',

    # Channels
    'ExtractedChannels',
    'extract_channels',
    'assemble_pixels',

    # Rank selection
    'validate_level',
    'select_rank',
    'storage_ratio',

    # SVD
    'SVDBackend',
    'TorchSVDBackend',
    'NumpySVDBackend',
    'get_backend',
    'Decomposition',
    'Decomposer',
    'decompose',
    'reconstruct',

    # Image compression
    'ImageSlim',
    'compress_image',
    'analyze_levels'
]
