"""Exceptions raised by the opponent-channel model."""


class OppChanError(Exception):
    """Base class for every model failure."""


class InvalidParameter(OppChanError, ValueError):
    """Non-positive width/shape, negative compression, or an azimuth outside the grid range."""


class AzimuthOutOfRange(InvalidParameter, LookupError):
    """An azimuth looked up on the grid lies outside the grid range."""


class ConfigurationError(OppChanError, ValueError):
    """Inconsistent parameter groups (weights vs. channels, locations vs. grid, unknown group)."""


class CalibrationLookupError(OppChanError, LookupError):
    """Calibration azimuth is inside the grid range but not an exact grid sample."""


class UndefinedResult(OppChanError, ArithmeticError):
    """A zero summed gradient makes the MAA prediction infinite."""

    def __init__(self, msg, azimuths=()):
        super().__init__(msg)
        self.azimuths = tuple(azimuths)
