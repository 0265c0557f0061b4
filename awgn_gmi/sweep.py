# awgn_gmi/sweep.py
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor, ProcessPoolExecutor, as_completed
from dataclasses import dataclass, asdict
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json
import math
import os
import warnings

import numpy as np
from tqdm import tqdm

from .constellation import validate_constellation, bits_per_symbol, symbol_energy, sigma_from_snr_db
from .evaluator import (
    DegenerateNoiseError,
    noise_regime,
    qam_eval_mi,
    qam_eval_gmi,
    DEFAULT_BLOCK_SIZE,
)
from .quadrature import GaussHermiteTable, gauss_hermite, DEFAULT_GH_ORDER

__all__ = ["GmiPoint", "GmiSweepResult", "DegenerationWarning", "sweep_mi_gmi", "evaluate"]

EXECUTORS = ("thread", "process")


class DegenerationWarning(RuntimeWarning):
    """An SNR point could not be evaluated and was flagged as failed."""


# ---------- dataclasses ----------

@dataclass
class GmiPoint:
    snr_db: float
    sigma: float
    mi: float
    gmi: float
    status: str = "ok"      # ok | noiseless | noise_limited | failed
    message: str = ""


@dataclass
class GmiSweepResult:
    success: bool
    meta: Dict[str, Any]
    points: List[GmiPoint]

    @property
    def snr_db(self) -> List[float]:
        return [p.snr_db for p in self.points]

    @property
    def sigma_curve(self) -> List[float]:
        return [p.sigma for p in self.points]

    @property
    def mi_curve(self) -> List[float]:
        return [p.mi for p in self.points]

    @property
    def gmi_curve(self) -> List[float]:
        return [p.gmi for p in self.points]

    @property
    def gap_curve(self) -> List[float]:
        return [p.mi - p.gmi for p in self.points]

    @property
    def status_curve(self) -> List[str]:
        return [p.status for p in self.points]

    @property
    def failed(self) -> List[int]:
        """Indices of SNR entries that could not be evaluated."""
        return [i for i, p in enumerate(self.points) if p.status == "failed"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "meta": self.meta,
            "snr_db": self.snr_db,
            "mi": self.mi_curve,
            "gmi": self.gmi_curve,
            "status": self.status_curve,
            "points": [asdict(p) for p in self.points],
        }

    def to_json_file(self, path: str | Path):
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)


# ---------- one SNR entry ----------

def _evaluate_point(snr_db: float, C: np.ndarray, Es: float,
                    table: GaussHermiteTable, block_size: int) -> GmiPoint:
    """
    MI/GMI at one SNR. Numeric trouble stays local to this point:
      sigma == 0   -> clamped to the noiseless limit (log2 M)
      sigma == inf -> clamped to 0
      anything else degenerate -> NaN with status 'failed'
    """
    snr_db = float(snr_db)
    if Es <= 0.0:
        return GmiPoint(snr_db, math.nan, math.nan, math.nan, status="failed",
                        message="zero symbol energy: noise level undefined")
    sigma = float(sigma_from_snr_db(Es, snr_db))
    try:
        regime = noise_regime(sigma)
        mi = qam_eval_mi(C, sigma, table=table, block_size=block_size)
        gmi = qam_eval_gmi(C, sigma, table=table, block_size=block_size)
    except DegenerateNoiseError as e:
        return GmiPoint(snr_db, sigma, math.nan, math.nan, status="failed", message=str(e))
    return GmiPoint(snr_db, sigma, mi, gmi, status=regime or "ok")


# ---------- fan-out / fan-in ----------

def _resolve_workers(workers: Optional[int], n_tasks: int) -> int:
    if workers is None:
        workers = os.cpu_count() or 1
    workers = int(workers)
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    return max(1, min(workers, n_tasks))


def _run_points(task, snrs: Sequence[float], workers: int, executor: str, progress: bool) -> List[GmiPoint]:
    """One task per SNR entry; slot i always holds the result for snrs[i]."""
    out: List[Optional[GmiPoint]] = [None] * len(snrs)
    if workers == 1:
        idx = range(len(snrs))
        if progress:
            idx = tqdm(idx, total=len(snrs), desc="MI/GMI", unit="snr")
        for i in idx:
            out[i] = task(snrs[i])
        return out

    pool_cls = ThreadPoolExecutor if executor == "thread" else ProcessPoolExecutor
    with pool_cls(max_workers=workers) as pool:
        futures = {pool.submit(task, snr): i for i, snr in enumerate(snrs)}
        done = as_completed(futures)
        if progress:
            done = tqdm(done, total=len(futures), desc="MI/GMI", unit="snr")
        for fut in done:
            out[futures[fut]] = fut.result()
    return out


def sweep_mi_gmi(
    constellation,
    snr_db_list,
    *,
    M: Optional[int] = None,
    gh_order: int = DEFAULT_GH_ORDER,
    block_size: int = DEFAULT_BLOCK_SIZE,
    workers: Optional[int] = None,
    executor: str = "thread",
    progress: bool = False,
) -> GmiSweepResult:
    """
    MI and GMI of `constellation` at every Es/N0 in `snr_db_list` (dB).

    The constellation is validated before any work starts (M >= 2, M = 2^m,
    M matching the symbol count if given). Each SNR entry is an independent
    task; results come back in input order. Failed entries carry NaN with
    status 'failed' and raise a DegenerationWarning; they never abort the
    other entries.
    """
    C = validate_constellation(constellation, M=M, require_pow2=True)
    m = bits_per_symbol(C.size)
    if executor not in EXECUTORS:
        raise ValueError(f"executor must be one of {EXECUTORS}, got {executor!r}")

    snrs = [float(v) for v in np.asarray(snr_db_list, dtype=float).reshape(-1)]
    Es = symbol_energy(C)
    table = gauss_hermite(gh_order)
    n_workers = _resolve_workers(workers, len(snrs)) if snrs else 0

    task = partial(_evaluate_point, C=C, Es=Es, table=table, block_size=int(block_size))
    points = _run_points(task, snrs, n_workers, executor, progress) if snrs else []

    for i, p in enumerate(points):
        if p.status == "failed":
            warnings.warn(f"SNR entry {i} ({p.snr_db} dB) not evaluated: {p.message}",
                          DegenerationWarning, stacklevel=2)

    meta = {
        "M": int(C.size),
        "bits_per_symbol": int(m),
        "Es": float(Es),
        "gh_order": int(table.order),
        "block_size": int(block_size),
        "workers": int(n_workers),
        "executor": executor,
    }
    success = all(p.status != "failed" for p in points)
    return GmiSweepResult(success=success, meta=meta, points=points)


def evaluate(constellation, snr_db, *, M: Optional[int] = None, **kwargs) -> Tuple[np.ndarray, np.ndarray]:
    """
    evaluate(constellation, snr_db) -> (mi, gmi)

    Two float arrays of length len(snr_db), index-aligned with the input.
    Extra keyword arguments go to sweep_mi_gmi (gh_order, workers, ...).
    """
    res = sweep_mi_gmi(constellation, snr_db, M=M, **kwargs)
    return np.asarray(res.mi_curve, dtype=float), np.asarray(res.gmi_curve, dtype=float)
