"""Exception types raised by the layout pipeline."""


class LayoutError(Exception):
    """Base class for every error raised while deploying a layout."""


class RenderError(LayoutError):
    """Raised when a template is malformed or references an unknown value."""


class ConditionError(LayoutError):
    """Raised when a condition cannot be evaluated or is not boolean."""


class InvalidInput(LayoutError):
    """Raised when a user answer cannot be converted or validated.

    The prompt loop recovers from this error by asking again unless the
    ask-once policy is active.
    """


class Interrupted(LayoutError):
    """Raised when input ended or the user interrupted the dialog."""


class Cancelled(LayoutError):
    """Raised when the run context was cancelled."""


class ManifestError(LayoutError):
    """Raised when no usable manifest can be found, selected or parsed."""


class VersionMismatch(ManifestError):
    """Raised when the manifest version constraint rejects the application version."""


class HookError(LayoutError):
    """Raised when a before/after hook fails."""


class SourceError(LayoutError):
    """Raised when a layout source cannot be materialized locally."""


class ConfigError(LayoutError):
    """Raised when the user configuration file is invalid."""
