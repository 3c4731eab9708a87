#!/usr/bin/env python3
"""
Compare MAA predictions and cortex responses across listener groups.
Usage:
    python scripts/run_groups.py --out figs/groups.png
"""
from pathlib import Path
import argparse
import logging
from oppchan_analysis.groups import run_groups
from oppchan_analysis.viz    import plot_group_maas

if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--groups", nargs="*", default=None, help="subset of listener groups")
    ap.add_argument("--out", type=str, default="figs/groups.png", help="output figure")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = ap.parse_args()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        handlers=[handler])

    x, summary = run_groups(args.groups)
    for name, s in summary.items():
        pairs = ", ".join(f"{a:g}°: {p:.1f} (obs {o:.1f})"
                          for a, o, p in zip(s["data"][:, 0], s["data"][:, 1], s["maa_at_data"]))
        shifts, mean_resp = s["shift"]
        print(f"{name:12s} MAA {pairs}")
        print(f"{'':12s} mean response by shift: "
              + ", ".join(f"{d:g}°={r:.1f}" for d, r in zip(shifts, mean_resp)))

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    plot_group_maas(x, summary, out_path=out_path)
    print(f"✓ saved → {out_path}")
