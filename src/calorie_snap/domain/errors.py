"""Error types raised across the session boundary."""

from enum import Enum


class AcquisitionErrorKind(str, Enum):
    """Reasons an image could not be acquired."""

    UNSUPPORTED = "unsupported"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    BUSY = "busy"
    UNKNOWN = "unknown"


ACQUISITION_MESSAGES: dict[AcquisitionErrorKind, str] = {
    AcquisitionErrorKind.UNSUPPORTED: (
        "Camera is not supported here. Please upload a photo instead."
    ),
    AcquisitionErrorKind.PERMISSION_DENIED: (
        "Camera permission was denied. Please allow access in your settings "
        "or upload a photo."
    ),
    AcquisitionErrorKind.NOT_FOUND: "No camera found on this device.",
    AcquisitionErrorKind.BUSY: "Camera is in use by another app.",
    AcquisitionErrorKind.UNKNOWN: "Unable to access camera.",
}


class AcquisitionError(Exception):
    """Raised when an image source cannot produce an image."""

    def __init__(
        self, kind: AcquisitionErrorKind, user_message: str | None = None
    ) -> None:
        self.kind = kind
        self.user_message = user_message or ACQUISITION_MESSAGES[kind]
        super().__init__(self.user_message)


class EstimationError(RuntimeError):
    """Raised when a nutrition estimate could not be produced."""


class ConfigurationError(EstimationError):
    """Raised when the estimator is called without required configuration."""


class InvalidTransitionError(Exception):
    """Raised when a user event is not valid in the current session phase."""
