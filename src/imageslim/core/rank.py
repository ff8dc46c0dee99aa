"""
Mapping from a compression level to a truncation rank.
"""

import numbers

from .exceptions import InvalidCompressionLevel, InvalidImageDimensions

MIN_LEVEL = 0
MAX_LEVEL = 9


def validate_level(level) -> int:
    """
    Check that ``level`` is an integer in [0, 9].

    Returns:
        The level as a plain int

    Raises:
        InvalidCompressionLevel: For bools, non-integers and out-of-range values
    """
    if isinstance(level, bool) or not isinstance(level, numbers.Integral):
        raise InvalidCompressionLevel(level)
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise InvalidCompressionLevel(level)
    return int(level)


def select_rank(max_rank: int, level: int) -> int:
    """
    Number of singular triples to keep for a compression level.

    ``k = floor(max_rank * (10 - level) / 10)``, never less than 1. Level 0
    keeps every triple; level 9 keeps a tenth of them (at least one).

    Args:
        max_rank: ``min(width, height)`` of the image
        level: Compression level in [0, 9]

    Returns:
        Truncation rank in [1, max_rank]
    """
    level = validate_level(level)
    if max_rank < 1:
        raise InvalidImageDimensions(f"Maximum rank must be positive, got {max_rank}")

    rank = max_rank * (10 - level) // 10
    return max(rank, 1)


def storage_ratio(shape, rank: int) -> float:
    """
    Fraction of the original values needed to store a rank-``rank`` factorization.

    Args:
        shape: Matrix shape (M, N)
        rank: Truncation rank

    Returns:
        ``rank * (M + N + 1) / (M * N)``
    """
    m, n = shape
    return rank * (m + n + 1) / (m * n)
