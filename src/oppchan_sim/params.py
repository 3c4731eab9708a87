"""Default parameters, listener-group presets and the resolver."""
import pyrsistent as pyr
import numpy as np

from .errors import ConfigurationError

# ------------------ evaluation grid ------------------
DEFAULT_AZIMUTHS  = np.arange(-90, 91, 1)             # degrees, 1° steps
DEFAULT_LOCATIONS = (-60, -30, 0, 30, 60)             # stimulus azimuths
DEFAULT_AZIMUTHS.setflags(write=False)


# ------------------ young listeners (defaults) ------------------
BASE_PARAMS = pyr.freeze({
    "chans": [
        # loc: peak azimuth (deg)
        # amp: peak amplitude (0-1), MAA predictions only
        # wid: width (deg), the SD when shp == 2
        # shp: shape (2 = normal, <2 = sharper, >2 = flatter)
        {"loc": -90.0, "amp": 1.0, "wid": 82.0, "shp": 2.6},
        {"loc":  90.0, "amp": 1.0, "wid": 82.0, "shp": 2.6},
    ],
    "ac": [
        # weights: left channel, right channel (average 1)
        {"label": "Left AC",  "comp": 3.0, "weights": [0.8907, 1.1093],
         "scale": 88.9365, "noise": 3.2907},
        {"label": "Right AC", "comp": 3.0, "weights": [0.9934, 1.0066],
         "scale": 81.4493, "noise": 3.3582},
    ],
    "pred": {
        # (reference azimuth, MAA, confidence interval) in degrees
        "data": [[0, 5.7903, 3.7489],
                 [45, 8.3496, 2.7205],
                 [60, 11.3807, 6.5036],
                 [75, 22.1313, 12.4812]],
        "k": 0.091,               # gradient -> MAA conversion; None to calibrate from maak
        "maak": [0, 5.7903],      # (reference azimuth, MAA) calibration pair
    },
})


def _group(amp, wid, shp, comp, ac_left, ac_right, data):
    p = pyr.thaw(BASE_PARAMS)
    for ch in p["chans"]:
        ch.update(amp=amp, wid=wid, shp=shp)
    for ac, (weights, scale, noise) in zip(p["ac"], (ac_left, ac_right)):
        ac.update(comp=comp, weights=list(weights), scale=scale, noise=noise)
    p["pred"]["data"] = [list(row) for row in data]
    # calibrate against the group's own straight-ahead MAA
    p["pred"]["maak"] = [row[:2] for row in p["pred"]["data"] if row[0] == 0][0]
    return pyr.freeze(p)


# ------------------ listener groups ------------------
GROUP_PARAMS = pyr.pmap({
    "young": BASE_PARAMS,
    "younger-old": _group(
        0.7299, 87.0, 2.2, 3.0,
        ([0.8840, 1.1160], 65.1448, 6.3310),
        ([1.0442, 0.9558], 59.2149, 5.4591),
        [(0, 6.1331, 2.2366), (45, 10.2045, 3.7220),
         (60, 9.1794, 2.9366), (75, 19.1181, 8.0054)]),
    "older-old": _group(
        0.4441, 73.0, 3.6, 2.0,
        ([0.9619, 1.0381], 48.6382, 6.7692),
        ([0.8893, 1.1107], 27.0258, 8.0610),
        [(0, 8.3319, 2.6899), (45, 22.1833, 6.5283),
         (60, 42.3492, 13.1188), (75, 39.9189, 16.1739)]),
})

GROUP_ORDER   = ("young", "younger-old", "older-old")
GROUP_ALIASES = {"youngold": "younger-old", "oldold": "older-old"}


# ------------------ convenience helpers ------------------
def group_names():
    """Return the preset names in presentation order."""
    return GROUP_ORDER


def make_group(name: str):
    """Return a *new* param-dict for listener group `name`."""
    key = GROUP_ALIASES.get(name.lower(), name.lower())
    if key not in GROUP_PARAMS:
        raise ConfigurationError(
            f"unknown listener group {name!r}; expected one of {', '.join(GROUP_ORDER)}")
    return pyr.thaw(GROUP_PARAMS[key])


def resolve_params(source=None):
    """
    Turn `source` into a full param-dict.

    `source` may be None or "" (young defaults), a group name, or a mapping
    with any of the keys "chans", "ac", "pred"; missing keys are taken from
    the defaults.
    """
    if source is None or source == "":
        return pyr.thaw(BASE_PARAMS)
    if isinstance(source, str):
        return make_group(source)
    try:
        keys = set(source)
    except TypeError:
        raise ConfigurationError(
            f"parameters must be a group name or a mapping, not {type(source).__name__}") from None
    unknown = keys - set(BASE_PARAMS)
    if unknown:
        raise ConfigurationError(f"unknown parameter groups: {sorted(unknown)}")
    p = pyr.thaw(BASE_PARAMS)
    for key in keys:
        p[key] = pyr.thaw(pyr.freeze(source[key]))
    return p
