from __future__ import annotations


class KestrelError(Exception):
    """Base class for errors raised by kestrel itself."""


class ConfigError(KestrelError):
    """Environment, search config or provider selection is unusable."""


class ResumeError(KestrelError):
    """The resume profile file is missing, unreadable or incomplete."""


class UnknownSectionError(KestrelError):
    """The section classifier returned a name with no answer chain."""


class NavigationError(KestrelError):
    """A page never showed the markers it was expected to show."""


class FormFillError(KestrelError):
    """An Easy Apply form could not be completed."""


class NoMoreJobsError(KestrelError):
    """The current search has no further result pages."""
