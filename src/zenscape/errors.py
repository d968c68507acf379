"""
Exception types raised by zenscape.
"""


class ZenscapeError(Exception):
    """Base class for all zenscape errors."""


class InvalidInputError(ZenscapeError, ValueError):
    """Input signal has an invalid shape, sample rate or content."""


class CompositionCancelled(ZenscapeError):
    """Composition was cancelled between layers."""


class EncodeError(ZenscapeError, RuntimeError):
    """
    Encoding the rendered stereo buffer failed.

    The rendered buffer itself is still valid and can be re-encoded.
    """
