"""
Quality metrics for compressed images.

This module provides metrics to compare a compressed image with its
original, both on 8-bit pixel arrays and on channel matrices.
"""

from typing import Any, Dict, Optional
import logging
import math

import numpy as np
import torch
from torch import Tensor

logger = logging.getLogger(__name__)


def _as_float_tensor(x) -> Tensor:
    return torch.as_tensor(np.asarray(x), dtype=torch.float64)


def image_mse(original, compressed) -> float:
    """
    Mean squared error between two images, in intensity units squared.

    Args:
        original: Reference image array
        compressed: Compressed image array of the same shape

    Returns:
        MSE over all pixels and channels
    """
    x = _as_float_tensor(original)
    y = _as_float_tensor(compressed)
    if x.shape != y.shape:
        raise ValueError(f"Image shapes don't match: {tuple(x.shape)} vs {tuple(y.shape)}")
    return torch.mean((x - y) ** 2).item()


def image_psnr(original, compressed, max_value: float = 255.0) -> float:
    """
    Peak signal-to-noise ratio in dB.

    Returns ``inf`` for identical images.
    """
    mse = image_mse(original, compressed)
    if mse == 0:
        return float('inf')
    return 10 * math.log10(max_value ** 2 / mse)


def max_abs_error(original, compressed) -> int:
    """Largest per-value intensity difference between two images."""
    x = _as_float_tensor(original)
    y = _as_float_tensor(compressed)
    if x.shape != y.shape:
        raise ValueError(f"Image shapes don't match: {tuple(x.shape)} vs {tuple(y.shape)}")
    return int(torch.max(torch.abs(x - y)).item())


def relative_error(x: Tensor, y: Tensor, eps: float = 1e-8) -> Tensor:
    """
    Compute relative error between two matrices.

    Args:
        x: Reference matrix
        y: Comparison matrix
        eps: Small value to avoid division by zero

    Returns:
        Relative error
    """
    return torch.norm(x - y) / (torch.norm(x) + eps)


def frobenius_distance(x: Tensor, y: Tensor) -> Tensor:
    """Frobenius norm distance between two matrices."""
    return torch.norm(x - y, p='fro')


def evaluate_compression_quality(
    original,
    compressed,
    compression_stats: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Evaluate a compressed image against its original.

    Args:
        original: Original image array
        compressed: Compressed image array
        compression_stats: Statistics from ImageSlim.compression_stats

    Returns:
        Dictionary with MSE, PSNR, maximum error and a quality grade
    """
    mse = image_mse(original, compressed)
    psnr = image_psnr(original, compressed)

    results = {
        'mse': mse,
        'psnr_db': psnr,
        'max_abs_error': max_abs_error(original, compressed),
    }

    # Grades follow the usual PSNR bands for 8-bit images
    if psnr > 40:
        quality_grade = 'A'
    elif psnr > 35:
        quality_grade = 'B'
    elif psnr > 30:
        quality_grade = 'C'
    elif psnr > 25:
        quality_grade = 'D'
    else:
        quality_grade = 'F'
    results['quality_grade'] = quality_grade

    if compression_stats:
        results['rank'] = compression_stats.get('rank')
        results['max_rank'] = compression_stats.get('max_rank')
        results['storage_ratio'] = compression_stats.get('storage_ratio')

    return results


def create_compression_report(
    evaluation_results: Dict[str, Any],
    image_name: str = "Image"
) -> str:
    """
    Create a human-readable compression quality report.

    Args:
        evaluation_results: Results from evaluate_compression_quality
        image_name: Name of the image for the report

    Returns:
        Formatted report string
    """
    psnr = evaluation_results['psnr_db']
    psnr_text = "inf" if math.isinf(psnr) else f"{psnr:.2f}"

    report = f"""
ImageSlim Compression Quality Report
====================================
Image: {image_name}

QUALITY ASSESSMENT
------------------
Mean Squared Error: {evaluation_results['mse']:.4f}
PSNR: {psnr_text} dB (Grade: {evaluation_results['quality_grade']})
Max Absolute Error: {evaluation_results['max_abs_error']}
"""

    if evaluation_results.get('rank') is not None:
        report += f"""
COMPRESSION SUMMARY
-------------------
Rank: {evaluation_results['rank']} / {evaluation_results['max_rank']}
Storage: {evaluation_results['storage_ratio'] * 100:.1f}% of original
"""

    return report
