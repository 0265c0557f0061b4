# awgn_gmi/cfg.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List
import copy

import numpy as np
import yaml

from .constellation import qam_constellation, psk_constellation, normalize_energy
from .evaluator import DEFAULT_BLOCK_SIZE
from .quadrature import DEFAULT_GH_ORDER

__all__ = [
    "DEFAULT_CFG",
    "lookup",
    "load_cfg",
    "merge_cfg",
    "snr_list_from_cfg",
    "constellation_from_cfg",
    "eval_kwargs_from_cfg",
]

DEFAULT_CFG: Dict[str, Any] = {
    "constellation": {
        "type": "qam",          # qam | psk | custom
        "M": 16,
        "labeling": "gray",     # gray | binary
        "normalize": True,
        "phase0": 0.0,          # psk only
        "points": None,         # custom only: [[re, im], ...] in label order
    },
    "channel": {
        "snr_db_list": None,
        "snr_db_range": None,   # {start, stop, step}, stop inclusive
    },
    "eval": {
        "gh_order": DEFAULT_GH_ORDER,
        "block_size": DEFAULT_BLOCK_SIZE,
        "workers": None,        # None -> os.cpu_count()
        "executor": "thread",
        "progress": False,
    },
    "io": {
        "write_json": True,
        "out_json": "artifacts/mi_gmi.json",
        "plot": False,
        "out_plot": "artifacts/mi_gmi.png",
        "show_plot": False,
    },
}


def lookup(d: dict, dotted: str, default=None):
    cur = d
    for k in dotted.split("."):
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def merge_cfg(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy of base with override's nested keys applied on top."""
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = merge_cfg(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def load_cfg(path: str | Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        user = yaml.safe_load(f) or {}
    if not isinstance(user, dict):
        raise ValueError(f"Config {path} must be a YAML mapping at top level")
    return merge_cfg(DEFAULT_CFG, user)


def snr_list_from_cfg(cfg: Dict[str, Any]) -> List[float]:
    snrs = lookup(cfg, "channel.snr_db_list")
    if snrs is not None:
        return [float(v) for v in snrs]

    rng = lookup(cfg, "channel.snr_db_range")
    if rng:
        try:
            start, stop, step = float(rng["start"]), float(rng["stop"]), float(rng["step"])
        except (KeyError, TypeError) as e:
            raise ValueError(f"channel.snr_db_range needs numeric start/stop/step (got {rng!r})") from e
        if step <= 0:
            raise ValueError(f"channel.snr_db_range.step must be > 0 (got {step})")
        return [float(v) for v in np.arange(start, stop + 0.5 * step, step)]

    raise ValueError("Config needs channel.snr_db_list or channel.snr_db_range")


def constellation_from_cfg(cfg: Dict[str, Any]) -> np.ndarray:
    c = cfg.get("constellation", {})
    kind = str(c.get("type", "qam")).lower()
    labeling = str(c.get("labeling", "gray"))

    if kind == "qam":
        return qam_constellation(int(c["M"]), labeling=labeling, normalize=bool(c.get("normalize", True)))
    if kind == "psk":
        return psk_constellation(int(c["M"]), labeling=labeling, phase0=float(c.get("phase0", 0.0)))
    if kind == "custom":
        pts = c.get("points")
        if not pts:
            raise ValueError("constellation.points is required for type 'custom'")
        arr = np.asarray(pts, dtype=float)
        if arr.ndim != 2 or arr.shape[1] != 2:
            raise ValueError(f"constellation.points must be a list of [re, im] pairs (got shape {arr.shape})")
        C = arr[:, 0] + 1j * arr[:, 1]
        return normalize_energy(C) if bool(c.get("normalize", True)) else C
    raise ValueError(f"Unknown constellation.type '{kind}'. Use 'qam', 'psk' or 'custom'.")


def eval_kwargs_from_cfg(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Keyword arguments for sweep_mi_gmi from the eval: block."""
    e = cfg.get("eval", {})
    workers = e.get("workers")
    return {
        "gh_order": int(e.get("gh_order", DEFAULT_GH_ORDER)),
        "block_size": int(e.get("block_size", DEFAULT_BLOCK_SIZE)),
        "workers": None if workers is None else int(workers),
        "executor": str(e.get("executor", "thread")).lower(),
        "progress": bool(e.get("progress", False)),
    }
