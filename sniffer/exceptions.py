"""Sniffer specific exceptions."""


class SnifferError(Exception):
    """Base class for errors raised at the edges of sniffer.

    Classification itself never raises; these only surface while loading
    inputs for it.
    """


class EnvironmentFileError(SnifferError):
    """Raised when a capability snapshot file cannot be read or parsed."""

    pass
