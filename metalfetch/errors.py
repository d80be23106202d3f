"""Error types raised while loading configuration and probing the host."""

from __future__ import annotations


class MetalfetchError(Exception):
    """Base class for fatal errors that abort a run."""


class ConfigIOError(MetalfetchError):
    """The configuration directory or file could not be created, read or written."""


class ConfigParseError(MetalfetchError):
    """The configuration file content is not a valid configuration record."""


class ProbeInvocationError(MetalfetchError):
    """A probe's command could not be run, or its file or output could not be read as text."""


class ProbeValueMissing(Exception):
    """A probe ran but produced no usable value.

    Never fatal: the registry resolves it to the ``"Unknown"`` sentinel.
    """
