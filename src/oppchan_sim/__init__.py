"""
Opponent-channel model of spatial hearing – tuning curves, cortical
location-shift responses and MAA predictions.

Import as:
    from oppchan_sim.core   import evaluate, run_model
    from oppchan_sim.params import BASE_PARAMS, make_group
"""
from .errors import (                               # noqa: F401
    OppChanError,
    InvalidParameter,
    AzimuthOutOfRange,
    ConfigurationError,
    CalibrationLookupError,
    UndefinedResult,
)
from .params import (                               # noqa: F401
    BASE_PARAMS,
    GROUP_PARAMS,
    DEFAULT_AZIMUTHS,
    DEFAULT_LOCATIONS,
    group_names,
    make_group,
    resolve_params,
)
from .core   import (                               # noqa: F401
    CalibrateFrom,
    Explicit,
    ModelResult,
    evaluate,
    run_model,
)
