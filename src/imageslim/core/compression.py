"""
High-level image compression using truncated SVD.

This module provides the main compression interface: it splits an image into
channel matrices, decomposes and truncates each channel to a shared rank,
and reassembles the result into an 8-bit image.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import logging

import numpy as np
import torch
from torch import Tensor
from tqdm import tqdm

from .channels import ExtractedChannels, assemble_pixels, extract_channels
from .rank import select_rank, storage_ratio, validate_level
from .svd import Decomposer, Decomposition, SVDBackend, reconstruct
from ..utils.metrics import frobenius_distance, image_mse, image_psnr, relative_error

logger = logging.getLogger(__name__)


class ImageSlim:
    """
    Lossy image compression by per-channel low-rank approximation.

    Every color channel is approximated with the same number of singular
    triples, derived from the image size and the compression level. Alpha is
    passed through untouched.

    Args:
        level: Compression level, 0 (none) to 9 (maximum)
        backend: SVD backend name ('torch' or 'numpy') or SVDBackend instance
        method: Reconstruction method ('matmul' or 'outer')
        max_workers: Worker threads for per-channel work (default: one per channel)
        progress_bar: Show progress during compression
    """

    def __init__(
        self,
        level: int = 5,
        backend: Union[str, SVDBackend] = "torch",
        method: str = "matmul",
        max_workers: Optional[int] = None,
        progress_bar: bool = True
    ):
        self.level = validate_level(level)
        self.decomposer = Decomposer(backend)
        self.method = method
        self.max_workers = max_workers
        self.progress_bar = progress_bar

        # Statistics of the most recent run
        self.compression_stats = {}

    def compress(self, image) -> np.ndarray:
        """
        Compress an image.

        Args:
            image: ``uint8`` array of shape (H, W), (H, W, 3) or (H, W, 4)

        Returns:
            New ``uint8`` array with the same shape as the input

        Raises:
            InvalidCompressionLevel: Level outside [0, 9]
            InvalidImageDimensions: Zero width/height or unsupported layout
            DecompositionError: SVD failed for any channel
        """
        self.compression_stats = {}
        level = validate_level(self.level)
        channels = extract_channels(image)
        rank = select_rank(channels.max_rank, level)

        logger.debug(
            f"Compressing {channels.shape[1]}x{channels.shape[0]} image at level {level} "
            f"(rank {rank}/{channels.max_rank})"
        )

        results = self._compress_channels(channels, rank)
        reconstructed = [matrix for matrix, _ in results]

        output = assemble_pixels(reconstructed, alpha=channels.alpha)

        self.compression_stats = {
            'level': level,
            'rank': rank,
            'max_rank': channels.max_rank,
            'storage_ratio': storage_ratio(channels.shape, rank),
            'channels': {
                name: stats for name, (_, stats) in zip(channels.names, results)
            }
        }
        self._log_compression_summary()

        return output

    def _compress_channel(
        self,
        matrix: Tensor,
        name: str,
        rank: int
    ) -> Tuple[Tensor, Dict[str, float]]:
        """Decompose and truncate a single channel."""
        decomposition = self.decomposer.decompose(matrix, channel=name)
        reconstructed = reconstruct(decomposition, rank, method=self.method)

        if torch.count_nonzero(matrix) == 0:
            rel_error = 0.0 if frobenius_distance(matrix, reconstructed) == 0 else float('inf')
        else:
            rel_error = relative_error(matrix, reconstructed).item() * 100

        stats = {
            'energy_retained': decomposition.energy_retained(rank),
            'relative_error': rel_error,
            'largest_singular_value': decomposition.S[0].item(),
        }
        return reconstructed, stats

    def _compress_channels(
        self,
        channels: ExtractedChannels,
        rank: int
    ) -> List[Tuple[Tensor, Dict[str, float]]]:
        """Run all channels concurrently and wait for every one of them."""
        n_channels = len(channels.matrices)
        workers = self.max_workers or n_channels

        pbar = None
        if self.progress_bar:
            pbar = tqdm(total=n_channels, desc="Compressing channels", unit="channel")

        try:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [
                    executor.submit(self._compress_channel, matrix, name, rank)
                    for matrix, name in zip(channels.matrices, channels.names)
                ]
                for _ in as_completed(futures):
                    if pbar:
                        pbar.update(1)

            # Raises the first failure in channel order; no partial image is built.
            return [future.result() for future in futures]
        finally:
            if pbar:
                pbar.close()

    def _log_compression_summary(self) -> None:
        """Log compression statistics summary."""
        if not self.compression_stats:
            return

        stats = self.compression_stats
        channel_stats = stats['channels'].values()
        avg_energy = sum(c['energy_retained'] for c in channel_stats) / len(channel_stats)
        avg_error = sum(c['relative_error'] for c in channel_stats) / len(channel_stats)

        logger.info(
            f"Compressed {len(channel_stats)} channel(s) at level {stats['level']}: "
            f"rank {stats['rank']}/{stats['max_rank']}, "
            f"storage {stats['storage_ratio'] * 100:.1f}% of original, "
            f"energy retained {avg_energy * 100:.2f}%, "
            f"relative error {avg_error:.2f}%"
        )


def compress_image(
    image,
    level: int,
    backend: Union[str, SVDBackend] = "torch",
    method: str = "matmul",
    max_workers: Optional[int] = None,
    progress_bar: bool = False
) -> np.ndarray:
    """
    Convenience function for image compression.

    Args:
        image: ``uint8`` array of shape (H, W), (H, W, 3) or (H, W, 4)
        level: Compression level, 0 (none) to 9 (maximum)
        backend: SVD backend name or instance
        method: Reconstruction method ('matmul' or 'outer')
        max_workers: Worker threads for per-channel work
        progress_bar: Show progress during compression

    Returns:
        Compressed image
    """
    compressor = ImageSlim(
        level=level,
        backend=backend,
        method=method,
        max_workers=max_workers,
        progress_bar=progress_bar
    )
    return compressor.compress(image)


def analyze_levels(
    image,
    levels: Optional[Sequence[int]] = None,
    backend: Union[str, SVDBackend] = "torch"
) -> Dict[str, Dict[str, Any]]:
    """
    Compare compression levels on one image.

    Each channel is decomposed once and reconstructed at every requested level.

    Args:
        image: ``uint8`` image array
        levels: Levels to evaluate (default: 0-9)
        backend: SVD backend name or instance

    Returns:
        Dictionary keyed by ``level_<n>`` with rank, storage ratio, MSE and PSNR
    """
    if levels is None:
        levels = range(10)
    levels = [validate_level(level) for level in levels]

    original = np.asarray(image)
    channels = extract_channels(original)
    decomposer = Decomposer(backend)
    decompositions: List[Decomposition] = [
        decomposer.decompose(matrix, channel=name)
        for matrix, name in zip(channels.matrices, channels.names)
    ]

    results = {}
    for level in levels:
        rank = select_rank(channels.max_rank, level)
        output = assemble_pixels(
            [reconstruct(d, rank) for d in decompositions],
            alpha=channels.alpha
        )
        results[f"level_{level}"] = {
            'level': level,
            'rank': rank,
            'storage_ratio': storage_ratio(channels.shape, rank),
            'mse': image_mse(original, output),
            'psnr_db': image_psnr(original, output),
        }

    return results
