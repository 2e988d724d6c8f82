"""
Exception types raised by tree construction and fitting.

Both concrete errors also derive from the matching built-in type so callers
that already catch ValueError / RuntimeError keep working.
"""


class RateTreeError(Exception):
    """Base class for ratetree errors."""


class InvalidParameterError(RateTreeError, ValueError):
    """Model or tree parameters are outside their domain."""


class CalibrationError(RateTreeError, RuntimeError):
    """A tree could not be fitted to the target discount curve."""


__all__ = [
    "RateTreeError",
    "InvalidParameterError",
    "CalibrationError",
]
