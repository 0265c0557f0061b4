# awgn_gmi/plots.py
import json
from pathlib import Path
from typing import List, Dict, Optional, Tuple
import numpy as np

import os, matplotlib
# Prevent GUI popups (which block batch runs) unless explicitly allowed
if not os.environ.get("ALLOW_GUI_PLOTS", ""):
    matplotlib.use("Agg")

import matplotlib.pyplot as plt


def _arrays_from_result(result: Dict) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Extract SNR, MI, GMI from a GmiSweepResult.to_dict() (or loaded JSON)."""
    snr = np.asarray(result.get("snr_db", []), dtype=float)
    mi = np.asarray(result.get("mi", []), dtype=float)
    gmi = np.asarray(result.get("gmi", []), dtype=float)
    return snr, mi, gmi


def load_result_json(path: str | Path) -> Dict:
    with open(path, "r") as f:
        return json.load(f)


def plot_mi_gmi_curves(
    curves: List[Dict],
    title: str = "MI / GMI vs SNR (AWGN)",
    save_path: Optional[str | Path] = None,
    show: bool = False,
    shannon: bool = True,
):
    """
    curves: list of dicts with keys 'label', 'snr_db', 'mi', 'gmi'
    (a GmiSweepResult.to_dict() plus a 'label' works as-is).
    MI is drawn solid, GMI dashed; failed (NaN) points are left as gaps.
    """
    if len(curves) == 0:
        raise ValueError("No curves provided to plot.")

    fig, ax = plt.subplots(figsize=(7, 4.5), dpi=130)
    mark = ["o", "s", "^", "D", "v", "P", "X"]
    snr_all = []

    for idx, c in enumerate(curves):
        label = str(c.get("label", f"cfg{idx+1}"))
        snr, mi, gmi = _arrays_from_result(c)
        order = np.argsort(snr)
        snr, mi, gmi = snr[order], mi[order], gmi[order]
        snr_all.append(snr)
        mk = mark[idx % len(mark)]
        ax.plot(snr, mi, marker=mk, linestyle="-", linewidth=1.6, markersize=4, label=f"{label} MI")
        if gmi.size:
            ax.plot(snr, gmi, marker=mk, linestyle="--", linewidth=1.6, markersize=4,
                    markerfacecolor="none", label=f"{label} GMI")

    if shannon and snr_all:
        x = np.concatenate(snr_all)
        x = x[np.isfinite(x)]
        if x.size:
            s = np.linspace(x.min(), x.max(), 200)
            ax.plot(s, np.log2(1.0 + 10.0 ** (s / 10.0)), color="k", linewidth=1.0, alpha=0.6,
                    label="log2(1+SNR)")

    ax.grid(True, which="both", alpha=0.3)
    ax.set_xlabel("SNR (Es/N0) [dB]")
    ax.set_ylabel("Information rate [bit/symbol]")
    ax.set_title(title)
    ax.legend(loc="best", fontsize=9)
    fig.tight_layout()

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path, bbox_inches="tight")
    if show and os.environ.get("ALLOW_GUI_PLOTS", "") and matplotlib.get_backend().lower() != "agg":
        plt.show()
    plt.close(fig)


def plot_multi_from_json(json_paths: List[str | Path],
                         labels: Optional[List[str]] = None,
                         title: str = "MI / GMI vs SNR (multi-config)",
                         save_path: Optional[str | Path] = None,
                         show: bool = False):
    """Overlay several result JSON files in one plot."""
    curves = []
    for i, p in enumerate(json_paths):
        res = load_result_json(p)
        lab = labels[i] if labels and i < len(labels) else Path(str(p)).stem
        curves.append(dict(res, label=lab))
    plot_mi_gmi_curves(curves, title=title, save_path=save_path, show=show)
