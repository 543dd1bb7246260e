"""Exceptions raised by etascatgen.

Both concrete errors derive from ``ValueError`` so that callers handling
configuration errors the usual way keep working.
"""


class ETASCatGenError(Exception):
    """Base class for all etascatgen errors."""


class InvalidParameter(ETASCatGenError, ValueError):
    """A process parameter is outside its admissible range."""


class SizeMismatch(ETASCatGenError, ValueError):
    """The magnitude and time output buffers differ in length."""
