#!/usr/bin/env python3
"""
Evaluate one listener group and draw the model figures.
Usage:
    python scripts/run_single.py --group older-old --figs 3 --out figs/older-old
"""
from pathlib import Path
import argparse
import logging
import matplotlib.pyplot as plt
from oppchan_sim.core   import run_model
from oppchan_sim.params import group_names
from oppchan_analysis.viz import (plot_tuning_curves, plot_gradients,
                                  plot_maa_predictions, plot_shift_responses)

if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--group", type=str, default="",
                    help=f"listener group ({', '.join(group_names())}); default young")
    ap.add_argument("--figs", type=int, choices=(0, 1, 2, 3), default=3,
                    help="0 none, 1 channels + MAA, 2 cortex, 3 all")
    ap.add_argument("--separate-cortices", action="store_true",
                    help="one cortex-response figure per cortex instead of their average")
    ap.add_argument("--out", type=str, default=None, help="directory for PNG files")
    ap.add_argument("--show", action="store_true", help="open the figures interactively")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = ap.parse_args()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        handlers=[handler])

    res = run_model(args.group)
    out = Path(args.out) if args.out else None
    if out:
        out.mkdir(parents=True, exist_ok=True)

    def _path(name):
        return out / f"{name}.png" if out else None

    if args.figs in (1, 3):
        plot_tuning_curves(res, out_path=_path("tuning"))
        plot_gradients(res, out_path=_path("gradients"))
        plot_maa_predictions(res, out_path=_path("maa"))
    if args.figs in (2, 3):
        for relative in (False, True):
            plot_shift_responses(res, relative=relative, separate=args.separate_cortices,
                                 out_path=_path("shift_relative" if relative else "shift_absolute"))

    print(f"k = {res.pred.k:.4g}; predicted MAA at 0° = {res.pred.maa_at(0):.2f}°")
    for u in res.ac:
        print(f"{u.label}: response range {u.resp.min():.2f}–{u.resp.max():.2f} nAm")
    if out:
        print(f"✓ saved → {out}")
    if args.show:
        plt.show()
