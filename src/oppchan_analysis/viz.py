"""Reusable plotting helpers."""
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

from .groups import average_responses

CHAN_COLORS = ["black", "#a6a6a6", "#c8c8c8"]
CHAN_STYLES = ["-", "--", "-", ":"]
SHIFT_COLORS = ["#e77817", "#00923f", "#0093dd", "#db214c", "#28166f"]
SHIFT_MARKERS = ["s", "^", "o", "+", "d"]


def _save(fig, out_path):
    fig.tight_layout()
    if out_path:
        fig.savefig(out_path, dpi=300)
    return fig


def plot_tuning_curves(result, *, out_path=None):
    x = result.azimuths
    fig, ax = plt.subplots(figsize=(7, 5))
    for i, ch in enumerate(result.chans):
        ax.plot(x, ch.tun, CHAN_STYLES[i % len(CHAN_STYLES)],
                color=CHAN_COLORS[i % len(CHAN_COLORS)], lw=2, label=f"{ch.loc:+g}°")
    ax.axvline(0, color="k", ls="--", lw=1)
    ax.set_xlim(x[0], x[-1])
    ax.set_ylim(0, 1)
    ax.set_title("Channel tuning curves")
    ax.set_xlabel("Azimuth in degrees")
    ax.set_ylabel("Response magnitude")
    ax.legend(fontsize=8)
    return _save(fig, out_path)


def plot_gradients(result, *, out_path=None):
    x = result.azimuths
    fig, ax = plt.subplots(figsize=(7, 5))
    for i, ch in enumerate(result.chans):
        ax.plot(x, ch.grd, CHAN_STYLES[i % len(CHAN_STYLES)],
                color=CHAN_COLORS[i % len(CHAN_COLORS)], lw=2)
    ax.plot(x, result.pred.grads, "-", color="red", lw=2, label="sum")
    ax.axvline(0, color="k", ls="--", lw=1)
    ax.set_xlim(x[0], x[-1])
    ax.set_ylim(bottom=0)
    ax.set_title("Tuning curve gradients")
    ax.set_xlabel("Azimuth in degrees")
    ax.set_ylabel("Response magnitude")
    ax.legend(fontsize=8)
    return _save(fig, out_path)


def plot_maa_predictions(result, *, out_path=None, ymax=60.0):
    """Predicted MAAs against the behavioural data (± CI)."""
    pred = result.pred
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.plot(pred.refs, pred.maas, "-", color="black", lw=2, label="prediction")
    if pred.data.size:
        ax.errorbar(pred.data[:, 0], pred.data[:, 1], yerr=pred.data[:, 2],
                    fmt="o", color="blue", label="data")
        ax.set_xlim(pred.data[0, 0] - 5, pred.data[-1, 0] + 5)
    ax.set_ylim(0, ymax)
    ax.axhline(30, color="k", ls="--", lw=1)
    ax.set_title("MAA predictions")
    ax.set_xlabel("Reference azimuth in degrees")
    ax.set_ylabel("MAA in degrees")
    ax.legend(fontsize=8)
    return _save(fig, out_path)


def plot_shift_responses(result, *, relative=False, separate=False, out_path=None):
    """
    Location-shift response curves, one line per post-shift location,
    against absolute (or relative) pre-shift location. Returns a list of
    figures: one per cortex with `separate`, else one cortex average.
    """
    locs = np.asarray(result.locations)
    panels = ([(u.label, u.resp) for u in result.ac] if separate
              else [("Averaged across cortices", average_responses(result))])
    figs = []
    for k, (title, resp) in enumerate(panels):
        fig, ax = plt.subplots(figsize=(7, 5))
        for ii, post in enumerate(locs):
            xs = locs - post if relative else locs
            ax.plot(xs, resp[:, ii], "-", marker=SHIFT_MARKERS[ii % len(SHIFT_MARKERS)],
                    color=SHIFT_COLORS[ii % len(SHIFT_COLORS)], label=f"{post:+g}°")
        if relative:
            ax.set_xlim(locs[0] - locs[-1], locs[-1] - locs[0])
        else:
            ax.set_xlim(locs[0], locs[-1])
        ax.set_title(title)
        ax.set_xlabel(f"{'Relative' if relative else 'Absolute'} pre-shift location in degrees")
        ax.set_ylabel("Response magnitude in nAm")
        ax.legend(title="Post-shift location:", fontsize=8, loc="lower right")
        path = None
        if out_path:
            path = out_path if len(panels) == 1 else _suffixed(out_path, k)
        figs.append(_save(fig, path))
    return figs


def plot_group_maas(azimuths, summary: dict, *, out_path=None, ymax=60.0):
    """MAA prediction curve and data for each listener group."""
    fig, axs = plt.subplots(1, len(summary), figsize=(5 * len(summary), 4),
                            sharey=True, squeeze=False)
    for ax, (name, s) in zip(axs[0], summary.items()):
        ax.plot(azimuths, s["maas"], "k-", lw=2)
        if s["data"].size:
            ax.errorbar(s["data"][:, 0], s["data"][:, 1], yerr=s["data"][:, 2],
                        fmt="o", color="blue")
            ax.set_xlim(s["data"][0, 0] - 5, s["data"][-1, 0] + 5)
        ax.set_ylim(0, ymax)
        ax.set_title(name)
        ax.set_xlabel("Reference azimuth in degrees")
    axs[0, 0].set_ylabel("MAA in degrees")
    return _save(fig, out_path)


def _suffixed(path, k):
    p = Path(path)
    return p.with_name(f"{p.stem}_{k}{p.suffix}")
