# awgn_gmi/constellation.py
"""
Constellation geometry and labeling helpers.

Convention: the symbol stored at index n carries the binary label n
(bit k of n is label bit k). All constructors below honour it, so a
constellation array can be handed to the evaluators as-is.
"""
from __future__ import annotations
from typing import Optional, Sequence, Union
import numpy as np

__all__ = [
    "InvalidConstellationSize",
    "bits_per_symbol",
    "gray_code",
    "gray_decode",
    "symbol_energy",
    "normalize_energy",
    "sigma_from_snr_db",
    "validate_constellation",
    "qam_constellation",
    "psk_constellation",
]

ArrayLike = Union[np.ndarray, Sequence[complex]]


class InvalidConstellationSize(ValueError):
    """Constellation size unusable for the requested evaluation (M < 2, M != 2^m, shape mismatch)."""


def bits_per_symbol(M: int) -> int:
    """m = log2(M) for M = 2^m >= 2, checked with integer arithmetic."""
    M = int(M)
    if M < 2:
        raise InvalidConstellationSize(f"Constellation needs at least 2 symbols, got M={M}")
    if M & (M - 1):
        raise InvalidConstellationSize(f"M={M} is not a power of two; bit labels are undefined")
    return M.bit_length() - 1


def gray_code(n):
    """Binary -> reflected Gray code. Works on ints and integer arrays."""
    return n ^ (n >> 1)


def gray_decode(g):
    """Reflected Gray code -> binary (inverse of gray_code)."""
    if isinstance(g, np.ndarray):
        n = g.copy()
        shift = g >> 1
        while np.any(shift):
            n ^= shift
            shift = shift >> 1
        return n
    g = int(g)
    n = g
    while g:
        g >>= 1
        n ^= g
    return n


def symbol_energy(C: ArrayLike) -> float:
    """Average |C|^2 under a uniform prior."""
    C = np.asarray(C).reshape(-1)
    if C.size == 0:
        raise InvalidConstellationSize("Empty constellation has no symbol energy")
    return float(np.mean(np.abs(C) ** 2))


def normalize_energy(C: ArrayLike, Es: float = 1.0) -> np.ndarray:
    """Scale C so that symbol_energy(C) == Es."""
    C = np.asarray(C, dtype=np.complex128).reshape(-1)
    e0 = symbol_energy(C)
    if e0 <= 0.0:
        raise ValueError("Cannot normalize a constellation with zero symbol energy")
    return C * np.sqrt(float(Es) / e0)


def sigma_from_snr_db(Es: float, snr_db):
    """
    Noise level sigma (N0 = sigma^2) for a target Es/N0 in dB:
        sigma = sqrt(Es) * 10^(-snr_db/20)
    +inf dB -> 0 (noiseless), -inf dB -> inf. Array-safe.
    """
    snr = np.asarray(snr_db, dtype=float)
    with np.errstate(over="ignore"):
        sigma = np.sqrt(float(Es)) * np.power(10.0, -snr / 20.0)
    if sigma.ndim == 0:
        return float(sigma)
    return sigma


def validate_constellation(C: ArrayLike, M: Optional[int] = None, require_pow2: bool = True) -> np.ndarray:
    """
    Check a constellation before any evaluation starts and return it as a
    flat complex128 array.

    - single-row / single-column 2-D inputs are flattened, other 2-D shapes rejected
    - M (if given) must equal the number of symbols
    - M >= 2, and M = 2^m when require_pow2 (needed for GMI)
    - every symbol finite
    """
    arr = np.asarray(C)
    if arr.ndim == 2 and 1 in arr.shape:
        arr = arr.reshape(-1)
    if arr.ndim != 1:
        raise InvalidConstellationSize(
            f"Constellation must be a 1-D sequence of complex symbols, got shape {arr.shape}")
    arr = arr.astype(np.complex128, copy=False)

    if M is not None and int(M) != arr.size:
        raise InvalidConstellationSize(f"M={M} does not match the {arr.size} symbols supplied")
    if arr.size < 2:
        raise InvalidConstellationSize(f"Constellation needs at least 2 symbols, got M={arr.size}")
    if require_pow2:
        bits_per_symbol(arr.size)
    if not np.all(np.isfinite(arr)):
        raise InvalidConstellationSize("Constellation contains non-finite symbols")
    return arr


def _label_positions(labels: np.ndarray, labeling: str) -> np.ndarray:
    key = str(labeling).lower()
    if key == "gray":
        return gray_decode(labels)
    if key in ("binary", "natural"):
        return labels
    raise ValueError(f"Unknown labeling '{labeling}'. Use 'gray' or 'binary'.")


def qam_constellation(M: int, labeling: str = "gray", normalize: bool = True) -> np.ndarray:
    """
    M-QAM with index n labeled n.

    The low ceil(m/2) label bits select the in-phase level and the high
    floor(m/2) bits the quadrature level; odd m gives a rectangular
    2^ceil(m/2) x 2^floor(m/2) grid (M=2 degenerates to BPSK).
    With labeling='gray' neighbouring levels on each axis differ in one bit.
    """
    m = bits_per_symbol(M)
    m_i = (m + 1) // 2
    m_q = m // 2
    K_i, K_q = 1 << m_i, 1 << m_q

    n = np.arange(M, dtype=np.int64)
    p_i = _label_positions(n & (K_i - 1), labeling)
    p_q = _label_positions(n >> m_i, labeling)

    # PAM levels ..., -3, -1, +1, +3, ...
    I = 2.0 * p_i - (K_i - 1)
    Q = 2.0 * p_q - (K_q - 1)
    C = (I + 1j * Q).astype(np.complex128)
    return normalize_energy(C) if normalize else C


def psk_constellation(M: int, labeling: str = "gray", phase0: float = 0.0) -> np.ndarray:
    """Unit-energy M-PSK with index n labeled n; position around the circle set by the labeling."""
    bits_per_symbol(M)
    p = _label_positions(np.arange(M, dtype=np.int64), labeling)
    return np.exp(1j * (2.0 * np.pi * p / M + float(phase0))).astype(np.complex128)
