"""Exceptions raised by the truncated normal samplers."""


class RtnormError(Exception):
    """Base class for all errors raised by rtnorm."""


class InvalidIntervalError(RtnormError, ValueError):
    """The truncation interval is empty (``a >= b`` after standardization)."""


class InvalidParameterError(RtnormError, ValueError):
    """A bound is NaN, or ``mu``/``sigma``/sample sizes are not usable."""


class AlgorithmDidNotConvergeError(RtnormError, RuntimeError):
    """A rejection loop exhausted its iteration budget without accepting."""
