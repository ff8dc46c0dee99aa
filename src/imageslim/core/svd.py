"""
Singular value decomposition and low-rank reconstruction of channel matrices.

The numeric SVD itself is delegated to a backend (torch or numpy). The
Decomposer only validates input, puts the backend's output into a canonical
form (descending singular values, deterministic signs) and hands back a
Decomposition that the reconstruction step can truncate.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Type, Union
import logging

import numpy as np
import torch
from torch import Tensor

from .exceptions import DecompositionError

logger = logging.getLogger(__name__)


class SVDBackend(ABC):
    """
    Narrow interface to a thin SVD primitive.

    Implementations take an (M x N) float64 tensor and return
    ``(U, s, Vt)`` with shapes (M x r), (r,) and (r x N), ``r = min(M, N)``.
    Ordering and sign conventions are left to the backend.
    """

    name = "base"

    @abstractmethod
    def __call__(self, matrix: Tensor) -> Tuple[Tensor, Tensor, Tensor]:
        pass


class TorchSVDBackend(SVDBackend):
    """SVD via ``torch.linalg.svd``."""

    name = "torch"

    def __init__(self, device: Optional[Union[str, torch.device]] = None):
        self.device = device

    def __call__(self, matrix: Tensor) -> Tuple[Tensor, Tensor, Tensor]:
        if self.device is not None:
            matrix = matrix.to(self.device)
        U, s, Vt = torch.linalg.svd(matrix, full_matrices=False)
        return U.cpu(), s.cpu(), Vt.cpu()


class NumpySVDBackend(SVDBackend):
    """SVD via ``numpy.linalg.svd`` (LAPACK gesdd)."""

    name = "numpy"

    def __call__(self, matrix: Tensor) -> Tuple[Tensor, Tensor, Tensor]:
        U, s, Vt = np.linalg.svd(matrix.detach().cpu().numpy(), full_matrices=False)
        return torch.from_numpy(U), torch.from_numpy(s), torch.from_numpy(Vt)


BACKENDS: Dict[str, Type[SVDBackend]] = {
    TorchSVDBackend.name: TorchSVDBackend,
    NumpySVDBackend.name: NumpySVDBackend,
}


def get_backend(backend: Union[str, SVDBackend] = "torch") -> SVDBackend:
    """
    Resolve a backend name to an SVDBackend instance.

    Args:
        backend: Backend name ('torch' or 'numpy') or an SVDBackend instance

    Returns:
        SVDBackend instance
    """
    if isinstance(backend, SVDBackend):
        return backend
    if backend not in BACKENDS:
        raise ValueError(
            f"Unknown SVD backend: {backend!r}. Available: {', '.join(sorted(BACKENDS))}"
        )
    return BACKENDS[backend]()


@dataclass(frozen=True)
class Decomposition:
    """
    Thin SVD of one channel matrix.

    Attributes:
        U: Left singular vectors (M x r)
        S: Singular values, non-negative and sorted descending (r,)
        Vt: Right singular vectors transposed (r x N)
    """

    U: Tensor
    S: Tensor
    Vt: Tensor

    @property
    def max_rank(self) -> int:
        return self.S.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.U.shape[0], self.Vt.shape[1]

    def energy_retained(self, rank: int) -> float:
        """Fraction of squared singular value mass kept by the first ``rank`` triples."""
        total = torch.sum(self.S ** 2)
        if total == 0:
            return 1.0
        return (torch.sum(self.S[:rank] ** 2) / total).item()


class Decomposer:
    """
    Computes canonical SVDs of channel matrices.

    Args:
        backend: Backend name ('torch' or 'numpy') or SVDBackend instance
    """

    def __init__(self, backend: Union[str, SVDBackend] = "torch"):
        self.backend = get_backend(backend)

    def __call__(self, matrix: Tensor, channel: Optional[str] = None) -> Decomposition:
        return self.decompose(matrix, channel)

    def decompose(self, matrix: Tensor, channel: Optional[str] = None) -> Decomposition:
        """
        Decompose a matrix into ``(U, S, Vt)``.

        Args:
            matrix: 2-D real matrix
            channel: Channel name used in error messages

        Returns:
            Decomposition with descending singular values and normalized signs

        Raises:
            DecompositionError: Non-finite input or backend failure
        """
        matrix = torch.as_tensor(matrix, dtype=torch.float64)
        if matrix.dim() != 2 or matrix.numel() == 0:
            raise DecompositionError(
                f"Expected a non-empty 2-D matrix, got shape {tuple(matrix.shape)}", channel
            )
        if not torch.isfinite(matrix).all():
            raise DecompositionError("Matrix contains non-finite values", channel)

        try:
            U, s, Vt = self.backend(matrix)
        except (torch.linalg.LinAlgError, np.linalg.LinAlgError, RuntimeError, ValueError) as e:
            raise DecompositionError(f"SVD backend '{self.backend.name}' failed: {e}", channel) from e

        U = torch.as_tensor(U, dtype=torch.float64)
        s = torch.as_tensor(s, dtype=torch.float64)
        Vt = torch.as_tensor(Vt, dtype=torch.float64)
        self._check_shapes(matrix.shape, U, s, Vt, channel)

        U, s, Vt = self._sort_descending(U, s, Vt)
        U, Vt = self._normalize_signs(U, Vt)

        return Decomposition(U=U, S=s, Vt=Vt)

    def _check_shapes(self, shape, U: Tensor, s: Tensor, Vt: Tensor, channel: Optional[str]) -> None:
        m, n = shape
        r = min(m, n)
        if U.shape != (m, r) or s.shape != (r,) or Vt.shape != (r, n):
            raise DecompositionError(
                f"SVD backend '{self.backend.name}' returned shapes "
                f"{tuple(U.shape)}, {tuple(s.shape)}, {tuple(Vt.shape)} for a {m}x{n} matrix",
                channel
            )

    def _sort_descending(self, U: Tensor, s: Tensor, Vt: Tensor) -> Tuple[Tensor, Tensor, Tensor]:
        """Make singular values non-negative and descending, permuting vectors in lockstep."""
        # A negative singular value is the same triple with a flipped left vector.
        signs = torch.ones_like(s)
        signs[s < 0] = -1.0
        s = s * signs
        U = U * signs

        s, order = torch.sort(s, descending=True, stable=True)
        if not torch.equal(order, torch.arange(s.shape[0])):
            logger.debug(f"Reordering singular values returned by '{self.backend.name}' backend")
            U = U[:, order]
            Vt = Vt[order, :]
        return U, s, Vt

    @staticmethod
    def _normalize_signs(U: Tensor, Vt: Tensor) -> Tuple[Tensor, Tensor]:
        """Flip each triple so the largest-magnitude entry of its left vector is positive."""
        if U.shape[1] == 0:
            return U, Vt
        pivots = torch.argmax(U.abs(), dim=0)
        signs = torch.sign(U[pivots, torch.arange(U.shape[1])])
        signs = torch.where(signs == 0, torch.ones_like(signs), signs)
        return U * signs, Vt * signs.unsqueeze(1)


def decompose(matrix: Tensor, backend: Union[str, SVDBackend] = "torch") -> Decomposition:
    """
    Convenience function for a single decomposition.

    Args:
        matrix: 2-D real matrix
        backend: Backend name or SVDBackend instance

    Returns:
        Decomposition of ``matrix``
    """
    return Decomposer(backend).decompose(matrix)


def reconstruct(
    decomposition: Decomposition,
    rank: int,
    method: str = "matmul"
) -> Tensor:
    """
    Rank-``rank`` approximation from the leading singular triples.

    Computes ``sum_{i < rank} S[i] * outer(U[:, i], Vt[i, :])`` in float64.
    Triples beyond ``rank`` are never read.

    Args:
        decomposition: Canonical SVD of the matrix
        rank: Number of triples to keep, in [1, max_rank]
        method: 'matmul' (scaled factor product) or 'outer' (rank-1 accumulation)

    Returns:
        Unclamped (M x N) reconstruction
    """
    if isinstance(rank, bool) or not isinstance(rank, int):
        raise ValueError(f"Rank must be an integer, got {rank!r}")
    if not 1 <= rank <= decomposition.max_rank:
        raise ValueError(f"Rank must be in [1, {decomposition.max_rank}], got {rank}")

    U = decomposition.U[:, :rank].to(torch.float64)
    s = decomposition.S[:rank].to(torch.float64)
    Vt = decomposition.Vt[:rank, :].to(torch.float64)

    if method == "matmul":
        return (U * s) @ Vt
    elif method == "outer":
        result = torch.zeros(U.shape[0], Vt.shape[1], dtype=torch.float64)
        for i in range(rank):
            result.add_(torch.outer(U[:, i], Vt[i, :]), alpha=s[i].item())
        return result
    else:
        raise ValueError(f"Unknown reconstruction method: {method!r}")
