from __future__ import annotations


class ReloadError(Exception):
    """Base class for reloader failures."""


class ConfigInvalid(ReloadError):
    pass


class RuntimeUnavailable(ReloadError):
    pass


class SelfNotFound(ReloadError):
    pass


class MissingLabel(ReloadError):
    pass


class InsufficientSiblings(ReloadError):
    pass


class TargetNotFound(ReloadError):
    pass


class NotAFile(ReloadError):
    pass


class SignalDeliveryFailed(ReloadError):
    """Raised internally when a kill call fails; never escapes a watch session."""
