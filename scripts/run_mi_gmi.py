#!/usr/bin/env python3
"""
MI / GMI vs SNR for one constellation over AWGN.

Usage:
  python scripts/run_mi_gmi.py --cfg configs/qam16_gray.yaml
  python scripts/run_mi_gmi.py --cfg configs/qam16_gray.yaml --out artifacts/qam16.json --workers 4
"""
import argparse
import time

from awgn_gmi.cfg import (
    load_cfg,
    lookup,
    snr_list_from_cfg,
    constellation_from_cfg,
    eval_kwargs_from_cfg,
)
from awgn_gmi.sweep import sweep_mi_gmi


def main():
    p = argparse.ArgumentParser(description="Gauss-Hermite MI/GMI of a constellation over AWGN.")
    p.add_argument("--cfg", required=True, help="YAML with constellation/channel/eval/io blocks.")
    p.add_argument("--out", default=None, help="Result JSON (overrides io.out_json).")
    p.add_argument("--workers", type=int, default=None, help="Parallel SNR tasks (overrides eval.workers).")
    p.add_argument("--gh-order", type=int, default=None, help="Quadrature nodes per dimension (overrides eval.gh_order).")
    args = p.parse_args()

    cfg = load_cfg(args.cfg)
    C = constellation_from_cfg(cfg)
    snrs = snr_list_from_cfg(cfg)
    kw = eval_kwargs_from_cfg(cfg)
    if args.workers is not None:
        kw["workers"] = args.workers
    if args.gh_order is not None:
        kw["gh_order"] = args.gh_order

    print(f"[info] M={C.size}, {len(snrs)} SNR points, GH order {kw['gh_order']}")
    t0 = time.perf_counter()
    res = sweep_mi_gmi(C, snrs, **kw)
    print(f"[info] done in {time.perf_counter() - t0:.2f} s")

    for pt in res.points:
        flag = "" if pt.status == "ok" else f"  [{pt.status}]"
        print(f"  SNR {pt.snr_db:6.2f} dB: MI={pt.mi:.4f}  GMI={pt.gmi:.4f}  gap={pt.mi - pt.gmi:.4f}{flag}")
    if not res.success:
        print(f"[warn] {len(res.failed)} SNR point(s) failed: indices {res.failed}")

    io = cfg.get("io", {})
    out_json = args.out or io.get("out_json", "artifacts/mi_gmi.json")
    if args.out or bool(io.get("write_json", True)):
        res.to_json_file(out_json)
        print("[info] result saved to", out_json)

    if bool(io.get("plot", False)):
        from awgn_gmi.plots import plot_mi_gmi_curves
        label = f"{lookup(cfg, 'constellation.M', C.size)}-{str(lookup(cfg, 'constellation.type', 'qam')).upper()} " \
                f"({lookup(cfg, 'constellation.labeling', 'gray')})"
        out_png = io.get("out_plot", "artifacts/mi_gmi.png")
        plot_mi_gmi_curves([dict(res.to_dict(), label=label)], save_path=out_png,
                           show=bool(io.get("show_plot", False)))
        print("[info] plot saved to", out_png)


if __name__ == "__main__":
    main()
