"""Domain models for the capture session."""

from dataclasses import dataclass
from enum import Enum

from calorie_snap.domain.food import FoodAnalysis


class Phase(str, Enum):
    """Mutually exclusive phases of a capture session."""

    DASHBOARD = "DASHBOARD"
    ACQUIRING = "ACQUIRING"
    ANALYZING = "ANALYZING"
    REVIEWING = "REVIEWING"


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the session; replaced, never mutated."""

    phase: Phase = Phase.DASHBOARD
    analysis: FoodAnalysis | None = None
    image: str | None = None
    error: str | None = None
    ticket: int = 0
    capture_id: int = 0
    pending_delete_id: str | None = None


# User events


@dataclass(frozen=True)
class CaptureRequested:
    pass


@dataclass(frozen=True)
class CaptureCancelled:
    pass


@dataclass(frozen=True)
class AcquisitionFailed:
    message: str


@dataclass(frozen=True)
class ImageAcquired:
    image: str


@dataclass(frozen=True)
class AnalysisAbandoned:
    pass


@dataclass(frozen=True)
class Confirmed:
    pass


@dataclass(frozen=True)
class Discarded:
    pass


@dataclass(frozen=True)
class ErrorDismissed:
    pass


@dataclass(frozen=True)
class DeleteRequested:
    entry_id: str


@dataclass(frozen=True)
class DeleteConfirmed:
    pass


@dataclass(frozen=True)
class DeleteCancelled:
    pass


# Completion events, tagged with the ticket of the request that produced them


@dataclass(frozen=True)
class EstimationSucceeded:
    ticket: int
    analysis: FoodAnalysis


@dataclass(frozen=True)
class EstimationFailed:
    ticket: int
    message: str


SessionEvent = (
    CaptureRequested
    | CaptureCancelled
    | AcquisitionFailed
    | ImageAcquired
    | AnalysisAbandoned
    | Confirmed
    | Discarded
    | ErrorDismissed
    | DeleteRequested
    | DeleteConfirmed
    | DeleteCancelled
    | EstimationSucceeded
    | EstimationFailed
)


# Effects


@dataclass(frozen=True)
class AppendEntry:
    """Log the confirmed analysis."""

    analysis: FoodAnalysis
    image: str | None


@dataclass(frozen=True)
class RemoveEntry:
    """Delete a logged entry."""

    entry_id: str


@dataclass(frozen=True)
class RequestEstimate:
    """Start estimation for the acquired image under the given ticket."""

    ticket: int
    image: str


SessionEffect = AppendEntry | RemoveEntry | RequestEstimate


@dataclass(frozen=True)
class Transition:
    """Result of applying an event to a session state."""

    state: SessionState
    effects: tuple[SessionEffect, ...] = ()
