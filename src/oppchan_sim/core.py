"""
Core numerical engine for the opponent-channel model.
Pure functions only – no plotting, no CLI.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass

import numpy as np
from scipy.stats import gennorm

from .errors import (AzimuthOutOfRange, CalibrationLookupError, ConfigurationError,
                     InvalidParameter, UndefinedResult)
from .params import DEFAULT_AZIMUTHS, DEFAULT_LOCATIONS, resolve_params

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------ results
@dataclass(frozen=True)
class Channel:
    loc: float
    amp: float
    wid: float
    shp: float
    tun: np.ndarray         # tuning curve over the grid, range [0, amp]
    grd: np.ndarray         # gradient magnitude over the grid


@dataclass(frozen=True)
class CorticalUnit:
    label: str
    comp: float
    weights: tuple
    scale: float            # nAm
    noise: float            # nAm
    resp: np.ndarray        # [pre_loc, post_loc]


@dataclass(frozen=True)
class Explicit:
    """Gradient-to-MAA conversion factor given directly."""
    k: float


@dataclass(frozen=True)
class CalibrateFrom:
    """Derive the conversion factor from one (reference azimuth, MAA) observation."""
    azimuth: float
    maa: float


@dataclass(frozen=True)
class PredictionSet:
    data: np.ndarray        # (reference azimuth, MAA, CI) rows, passthrough
    conversion: Explicit | CalibrateFrom
    k: float                # conversion factor actually applied
    refs: np.ndarray
    grads: np.ndarray
    igrads: np.ndarray
    maas: np.ndarray

    def maa_at(self, azimuth: float) -> float:
        """Predicted MAA at a grid azimuth."""
        return float(self.maas[grid_index(self.refs, azimuth, "reference azimuth")])


@dataclass(frozen=True)
class ModelResult:
    chans: tuple
    ac: tuple
    pred: PredictionSet
    azimuths: np.ndarray
    locations: tuple


# ------------------------------------------------------------------ helpers
def _frozen(a) -> np.ndarray:
    a = np.array(a, dtype=float)
    a.setflags(write=False)
    return a


def check_grid(azimuths) -> np.ndarray:
    """Validate an ascending 1° azimuth grid and return it as a float array."""
    x = np.asarray(azimuths, dtype=float)
    if x.ndim != 1 or x.size < 2:
        raise ConfigurationError("azimuth grid needs at least two samples")
    if not np.allclose(np.diff(x), 1.0):
        raise ConfigurationError("azimuth grid must ascend in steps of 1 degree")
    return _frozen(x)


def grid_index(azimuths, azimuth: float, what: str = "azimuth") -> int:
    """
    Index of `azimuth` in the grid, exact match only.

    Outside the grid range -> AzimuthOutOfRange (both an InvalidParameter
    and a LookupError); inside it but between samples -> CalibrationLookupError.
    """
    x = np.asarray(azimuths)
    if not x[0] <= azimuth <= x[-1]:
        raise AzimuthOutOfRange(
            f"{what} {azimuth} lies outside the grid range [{x[0]:g}, {x[-1]:g}]")
    hits = np.flatnonzero(x == azimuth)
    if hits.size == 0:
        raise CalibrationLookupError(f"{what} {azimuth} is not an exact grid sample")
    return int(hits[0])


def location_indices(azimuths, locations) -> tuple:
    """Grid indices of the stimulus locations; every location must be a grid sample."""
    x = np.asarray(azimuths)
    idx = []
    for loc in locations:
        hits = np.flatnonzero(x == loc)
        if hits.size == 0:
            raise ConfigurationError(f"stimulus location {loc} is not on the azimuth grid")
        idx.append(int(hits[0]))
    return tuple(idx)


# ------------------------------------------------------------------ channels
def gnorm_pdf(x, loc: float, wid: float, shp: float) -> np.ndarray:
    """
    Generalized-Gaussian density, scaled so that `wid` is the standard
    deviation when `shp` == 2.
    """
    if wid <= 0:
        raise InvalidParameter(f"channel width must be positive, got {wid}")
    if shp <= 0:
        raise InvalidParameter(f"channel shape must be positive, got {shp}")
    return gennorm.pdf(np.asarray(x, dtype=float), shp, loc=loc, scale=wid * math.sqrt(2))


def tuning_curve(x, loc: float, wid: float, shp: float, amp: float = 1.0) -> np.ndarray:
    """Density over the grid, rescaled to span exactly [0, amp]."""
    if amp <= 0:
        raise InvalidParameter(f"channel amplitude must be positive, got {amp}")
    tun = gnorm_pdf(x, loc, wid, shp)
    tun = tun - tun.min()
    if tun.max() <= 0:
        raise InvalidParameter(f"tuning curve at {loc}° is flat over the grid")
    return tun / tun.max() * amp


def tuning_gradient(tun) -> np.ndarray:
    """
    Gradient magnitude: centred difference at interior samples,
    one-sided difference at the two ends.
    """
    tun = np.asarray(tun, dtype=float)
    fwd = np.append(np.diff(tun), 0.0)
    bwd = -np.append(np.diff(tun[::-1]), 0.0)[::-1]
    grd = np.abs(fwd) + np.abs(bwd)
    grd[1:-1] /= 2
    return grd


def build_channels(chan_params, azimuths=DEFAULT_AZIMUTHS):
    """Return (channels, summed gradient) for a list of channel param-dicts."""
    x = check_grid(azimuths)
    chans = []
    grads = np.zeros_like(x)
    for p in chan_params:
        loc, amp, wid, shp = (float(p[k]) for k in ("loc", "amp", "wid", "shp"))
        if not x[0] <= loc <= x[-1]:
            raise InvalidParameter(
                f"channel peak {loc} lies outside the grid range [{x[0]:g}, {x[-1]:g}]")
        tun = tuning_curve(x, loc, wid, shp, amp)
        grd = tuning_gradient(tun)
        grads += grd
        chans.append(Channel(loc, amp, wid, shp, _frozen(tun), _frozen(grd)))
    if not chans:
        raise ConfigurationError("at least one channel is required")
    logger.debug("built %d channel(s) over %d azimuths", len(chans), x.size)
    return tuple(chans), _frozen(grads)


# --------------------------------------------------------- cortical units
def cortical_responses(chans, ac_params, azimuths=DEFAULT_AZIMUTHS,
                       locations=DEFAULT_LOCATIONS):
    """
    Location-shift response matrix for every cortical unit.

    Each channel drives a unit only through an *increase* in its
    (peak-normalised) activation from the pre- to the post-shift location.
    """
    idx = location_indices(azimuths, locations)
    n = len(idx)
    for p in ac_params:
        if len(p["weights"]) != len(chans):
            raise ConfigurationError(
                f"{p.get('label', 'cortical unit')!r} has {len(p['weights'])} weight(s) "
                f"for {len(chans)} channel(s)")
        if any(w < 0 for w in p["weights"]):
            raise InvalidParameter(f"{p.get('label', 'cortical unit')!r} has a negative weight")
        if p["comp"] < 0:
            raise InvalidParameter(f"compression must be non-negative, got {p['comp']}")

    # amplitude only matters for MAA predictions, so renormalise to peak 1
    norm = [c.tun / c.tun.max() for c in chans]
    resps = [np.zeros((n, n)) for _ in ac_params]
    for pre in range(n):
        for post in range(n):
            for c, tun in enumerate(norm):
                d = max(tun[idx[post]] - tun[idx[pre]], 0.0)
                for resp, p in zip(resps, ac_params):
                    resp[pre, post] += d * p["weights"][c]

    units = []
    for resp, p in zip(resps, ac_params):
        comp = float(p["comp"])
        if comp:
            resp = 1 - np.exp(-resp * comp)
        resp = resp * float(p["scale"]) + float(p["noise"])
        units.append(CorticalUnit(str(p.get("label", "")), comp,
                                  tuple(float(w) for w in p["weights"]),
                                  float(p["scale"]), float(p["noise"]), _frozen(resp)))
    logger.debug("computed %d %dx%d response matrices", len(units), n, n)
    return tuple(units)


# ------------------------------------------------------------ predictions
def conversion_from(pred_params) -> Explicit | CalibrateFrom:
    """Read the conversion rule from a pred param-dict (k None/NaN -> calibrate)."""
    k = pred_params.get("k")
    if k is not None and not math.isnan(k):
        return Explicit(float(k))
    maak = pred_params.get("maak")
    if maak is None or len(maak) != 2:
        raise ConfigurationError("k is unset and no (azimuth, MAA) pair is given in maak")
    return CalibrateFrom(float(maak[0]), float(maak[1]))


def predict_maas(grads, azimuths, conversion):
    """
    Return (igrads, k, maas). A zero gradient gives an infinite MAA; it is
    left as inf for the caller to report.
    """
    grads = np.asarray(grads, dtype=float)
    with np.errstate(divide="ignore"):
        igrads = 1.0 / grads
    if isinstance(conversion, CalibrateFrom):
        i = grid_index(azimuths, conversion.azimuth, "calibration azimuth")
        if not np.isfinite(igrads[i]):
            raise UndefinedResult(
                f"summed gradient is zero at the calibration azimuth {conversion.azimuth}",
                [conversion.azimuth])
        k = conversion.maa / igrads[i]
        logger.debug("calibrated k = %.6g from %s", k, conversion)
    else:
        k = conversion.k
    with np.errstate(invalid="ignore"):
        maas = igrads * k
    return igrads, float(k), maas


# ----------------------------------------------------------- entry points
def evaluate(params=None, azimuths=DEFAULT_AZIMUTHS, locations=DEFAULT_LOCATIONS, *,
             strict: bool = True) -> ModelResult:
    """
    Run the full model on a param-dict with "chans", "ac" and "pred".

    With `strict`, a zero summed gradient anywhere on the grid raises
    UndefinedResult; otherwise those MAAs are returned as inf.
    """
    p = resolve_params() if params is None else params
    missing = {"chans", "ac", "pred"} - set(p)
    if missing:
        raise ConfigurationError(f"missing parameter groups: {sorted(missing)}")
    x = check_grid(azimuths)
    locations = tuple(float(loc) for loc in locations)

    chans, grads = build_channels(p["chans"], x)
    ac = cortical_responses(chans, p["ac"], x, locations)

    conversion = conversion_from(p["pred"])
    igrads, k, maas = predict_maas(grads, x, conversion)
    bad = x[~np.isfinite(maas)]
    if bad.size:
        msg = f"MAA undefined (zero gradient) at {bad.size} azimuth(s): {bad.tolist()}"
        if strict:
            raise UndefinedResult(msg, bad.tolist())
        logger.warning(msg)

    data = np.asarray(p["pred"].get("data", []), dtype=float).reshape(-1, 3)
    pred = PredictionSet(_frozen(data), conversion, k, x, grads,
                         _frozen(igrads), _frozen(maas))
    return ModelResult(chans, ac, pred, x, locations)


def run_model(source="", azimuths=DEFAULT_AZIMUTHS, locations=DEFAULT_LOCATIONS, *,
              strict: bool = True) -> ModelResult:
    """Resolve a group name / partial override, then evaluate it."""
    return evaluate(resolve_params(source), azimuths, locations, strict=strict)
