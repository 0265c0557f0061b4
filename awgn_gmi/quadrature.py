# awgn_gmi/quadrature.py
"""
Gauss-Hermite tables for integrating against exp(-x^2).

One real dimension:   ∫ f(x) e^{-x^2} dx           ≈ Σ_l w[l] f(x[l])
Two real dimensions:  ∫∫ f(x,y) e^{-x^2-y^2} dx dy ≈ Σ_l1 Σ_l2 w[l1] w[l2] f(x[l1], x[l2])

The 2D grid models the in-phase/quadrature components of complex AWGN.
"""
from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
import numpy as np
from numpy.polynomial.hermite import hermgauss

__all__ = ["GaussHermiteTable", "gauss_hermite", "GH10", "DEFAULT_GH_ORDER"]

DEFAULT_GH_ORDER = 10


@dataclass(frozen=True)
class GaussHermiteTable:
    """Read-only abscissas/weights of a fixed-order Gauss-Hermite rule."""
    order: int
    nodes: np.ndarray
    weights: np.ndarray

    def nodes2d(self) -> np.ndarray:
        """Complex noise samples x[l1] + j*x[l2], flattened row-major (l1 outer). Shape [order^2]."""
        x = self.nodes
        return (x[:, None] + 1j * x[None, :]).reshape(-1)

    def weights2d(self) -> np.ndarray:
        """Tensor-product weights w[l1]*w[l2], flattened like nodes2d(). Shape [order^2]."""
        w = self.weights
        return np.outer(w, w).reshape(-1)


@lru_cache(maxsize=None)
def gauss_hermite(order: int = DEFAULT_GH_ORDER) -> GaussHermiteTable:
    """
    Gauss-Hermite rule of the given order, built once per process and shared.
    Exact for polynomials of degree <= 2*order - 1 against e^{-x^2}.
    """
    order = int(order)
    if order < 1:
        raise ValueError(f"Gauss-Hermite order must be >= 1, got {order}")
    x, w = hermgauss(order)
    x = np.ascontiguousarray(x, dtype=np.float64)
    w = np.ascontiguousarray(w, dtype=np.float64)
    x.setflags(write=False)
    w.setflags(write=False)
    return GaussHermiteTable(order=order, nodes=x, weights=w)


# Process-wide default table (10 nodes)
GH10 = gauss_hermite(DEFAULT_GH_ORDER)
