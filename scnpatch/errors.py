from __future__ import annotations


class ScnError(Exception):
    """Base class for SCN script failures."""


class MalformedScriptError(ScnError):
    """A segment was opened but never terminated."""


class RoundTripError(ScnError):
    """Segments no longer concatenate back to the scanned buffer."""


class HeaderError(ScnError):
    """The size header does not describe the buffer it sits in."""


class TextEncodeError(ScnError):
    """Text contains a character the script encoding cannot represent."""
