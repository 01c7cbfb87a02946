"""Session state machine for photo-based logging."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import uuid4

from calorie_snap.domain.errors import (
    AcquisitionError,
    ConfigurationError,
    InvalidTransitionError,
)
from calorie_snap.domain.food import FoodLogEntry
from calorie_snap.domain.session import (
    AcquisitionFailed,
    AnalysisAbandoned,
    AppendEntry,
    CaptureCancelled,
    CaptureRequested,
    Confirmed,
    DeleteCancelled,
    DeleteConfirmed,
    DeleteRequested,
    Discarded,
    ErrorDismissed,
    EstimationFailed,
    EstimationSucceeded,
    ImageAcquired,
    Phase,
    RemoveEntry,
    RequestEstimate,
    SessionEffect,
    SessionEvent,
    SessionState,
    Transition,
)
from calorie_snap.services.acquisition import ImageSource
from calorie_snap.services.estimator import NutritionEstimator
from calorie_snap.services.log_store import LogStore

ANALYSIS_FAILED_MESSAGE = (
    "We couldn't analyze that image. "
    "Please try again or ensure the food is clearly visible."
)
NOT_FOOD_MESSAGE = "That doesn't look like food, so there is nothing to log."

_logger = logging.getLogger(__name__)


def transition(state: SessionState, event: SessionEvent) -> Transition:
    """Apply an event to a session state and return the next state and effects."""
    if isinstance(event, EstimationSucceeded | EstimationFailed):
        return _complete_estimation(state, event)
    if state.phase is Phase.DASHBOARD:
        return _on_dashboard(state, event)
    if state.phase is Phase.ACQUIRING:
        return _on_acquiring(state, event)
    if state.phase is Phase.ANALYZING:
        if isinstance(event, AnalysisAbandoned):
            return Transition(_dashboard(state))
        raise _invalid(state, event)
    if isinstance(event, Confirmed):
        analysis = state.analysis
        if analysis is None:
            raise InvalidTransitionError("No analysis to confirm")
        if not analysis.is_food:
            raise InvalidTransitionError(NOT_FOOD_MESSAGE)
        return Transition(
            _dashboard(state), (AppendEntry(analysis=analysis, image=state.image),)
        )
    if isinstance(event, Discarded):
        return Transition(_dashboard(state))
    raise _invalid(state, event)


def _on_dashboard(state: SessionState, event: SessionEvent) -> Transition:
    if isinstance(event, CaptureRequested):
        return Transition(
            SessionState(
                phase=Phase.ACQUIRING,
                ticket=state.ticket,
                capture_id=state.capture_id + 1,
            ),
        )
    if isinstance(event, ErrorDismissed):
        return Transition(replace(state, error=None))
    if isinstance(event, DeleteRequested):
        return Transition(replace(state, pending_delete_id=event.entry_id))
    if isinstance(event, DeleteConfirmed):
        if state.pending_delete_id is None:
            raise InvalidTransitionError("No entry is awaiting deletion")
        return Transition(
            replace(state, pending_delete_id=None),
            (RemoveEntry(state.pending_delete_id),),
        )
    if isinstance(event, DeleteCancelled):
        return Transition(replace(state, pending_delete_id=None))
    raise _invalid(state, event)


def _on_acquiring(state: SessionState, event: SessionEvent) -> Transition:
    if isinstance(event, CaptureCancelled):
        return Transition(_dashboard(state))
    if isinstance(event, AcquisitionFailed):
        return Transition(replace(state, error=event.message))
    if isinstance(event, ImageAcquired):
        if not event.image:
            raise InvalidTransitionError("Acquired image is empty")
        ticket = state.ticket + 1
        return Transition(
            SessionState(
                phase=Phase.ANALYZING,
                image=event.image,
                ticket=ticket,
                capture_id=state.capture_id,
            ),
            (RequestEstimate(ticket=ticket, image=event.image),),
        )
    raise _invalid(state, event)


def _complete_estimation(
    state: SessionState, event: EstimationSucceeded | EstimationFailed
) -> Transition:
    if state.phase is not Phase.ANALYZING or event.ticket != state.ticket:
        _logger.info(
            "Discarding stale estimation result: ticket=%s current=%s phase=%s",
            event.ticket,
            state.ticket,
            state.phase.value,
        )
        return Transition(state)
    if isinstance(event, EstimationFailed):
        return Transition(_dashboard(state, error=event.message))
    return Transition(replace(state, phase=Phase.REVIEWING, analysis=event.analysis))


def _dashboard(state: SessionState, error: str | None = None) -> SessionState:
    return SessionState(
        phase=Phase.DASHBOARD,
        ticket=state.ticket,
        capture_id=state.capture_id,
        error=error,
    )


def _invalid(state: SessionState, event: SessionEvent) -> InvalidTransitionError:
    return InvalidTransitionError(
        f"{type(event).__name__} is not allowed while {state.phase.value}"
    )


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SessionService:
    """Runs the capture session and applies its effects to the food log."""

    log_store: LogStore
    estimator: NutritionEstimator
    analysis_timeout_seconds: float | None = 60.0
    environment: str = "production"
    clock: Callable[[], datetime] = _utc_now
    state: SessionState = field(default_factory=SessionState)

    def start_capture(self) -> SessionState:
        """Open the camera or upload view."""
        self._dispatch(CaptureRequested())
        return self.state

    def cancel_capture(self) -> SessionState:
        """Leave the camera view without an image."""
        self._dispatch(CaptureCancelled())
        return self.state

    async def capture(self, source: ImageSource) -> SessionState:
        """Acquire an image from a source and analyze it."""
        if self.state.phase is not Phase.ACQUIRING:
            raise InvalidTransitionError("Capture has not been started")
        capture_id = self.state.capture_id
        try:
            image = await source.acquire()
        except AcquisitionError as exc:
            _logger.warning("Image acquisition failed: kind=%s", exc.kind.value)
            if self._is_current_capture(capture_id):
                self._dispatch(AcquisitionFailed(exc.user_message))
            return self.state
        if not self._is_current_capture(capture_id):
            _logger.info(
                "Discarding image from capture %s; current capture is %s",
                capture_id,
                self.state.capture_id,
            )
            return self.state
        if image is None:
            return self.cancel_capture()
        return await self.submit_image(image)

    async def submit_image(self, image: str) -> SessionState:
        """Analyze an already acquired base64 image."""
        for request in self._dispatch(ImageAcquired(image)):
            await self._run_estimate(request)
        return self.state

    def abandon_analysis(self) -> SessionState:
        """Return to the dashboard while an analysis is in flight."""
        self._dispatch(AnalysisAbandoned())
        return self.state

    def confirm(self) -> SessionState:
        """Log the reviewed analysis."""
        self._dispatch(Confirmed())
        return self.state

    def discard(self) -> SessionState:
        """Drop the reviewed analysis without logging it."""
        self._dispatch(Discarded())
        return self.state

    def dismiss_error(self) -> SessionState:
        self._dispatch(ErrorDismissed())
        return self.state

    def request_delete(self, entry_id: str) -> SessionState:
        """Ask for confirmation before deleting an entry."""
        self._dispatch(DeleteRequested(entry_id))
        return self.state

    def confirm_delete(self) -> SessionState:
        self._dispatch(DeleteConfirmed())
        return self.state

    def cancel_delete(self) -> SessionState:
        self._dispatch(DeleteCancelled())
        return self.state

    def _is_current_capture(self, capture_id: int) -> bool:
        return (
            self.state.phase is Phase.ACQUIRING
            and self.state.capture_id == capture_id
        )

    def _dispatch(self, event: SessionEvent) -> list[RequestEstimate]:
        previous = self.state.phase
        result = transition(self.state, event)
        self.state = result.state
        if previous is not self.state.phase:
            _logger.info(
                "Session transition: %s -> %s on %s",
                previous.value,
                self.state.phase.value,
                type(event).__name__,
            )
        requests: list[RequestEstimate] = []
        for effect in result.effects:
            if isinstance(effect, RequestEstimate):
                requests.append(effect)
            else:
                self._apply(effect)
        return requests

    def _apply(self, effect: SessionEffect) -> None:
        if isinstance(effect, AppendEntry):
            entry = FoodLogEntry.from_analysis(
                effect.analysis,
                entry_id=uuid4().hex,
                logged_at=self.clock(),
                image=effect.image,
            )
            self.log_store.append(entry)
            _logger.info(
                "Food logged: id=%s food=%s calories=%s",
                entry.id,
                entry.food_name,
                entry.calories,
            )
        elif isinstance(effect, RemoveEntry):
            self.log_store.remove(effect.entry_id)
            _logger.info("Food log entry deleted: id=%s", effect.entry_id)

    async def _run_estimate(self, request: RequestEstimate) -> None:
        try:
            analysis = await asyncio.wait_for(
                self.estimator.estimate(request.image),
                timeout=self.analysis_timeout_seconds,
            )
        except ConfigurationError as exc:
            _logger.error("Nutrition analysis is not configured: %s", exc)
            self._dispatch(
                EstimationFailed(request.ticket, self._failure_message(exc))
            )
        except Exception as exc:
            _logger.exception(
                "Nutrition analysis failed", extra={"ticket": request.ticket}
            )
            self._dispatch(
                EstimationFailed(request.ticket, self._failure_message(exc))
            )
        else:
            self._dispatch(EstimationSucceeded(request.ticket, analysis))

    def _failure_message(self, exc: Exception) -> str:
        """Return the user-facing failure message with local debug info."""
        if self.environment == "local":
            detail = f"{type(exc).__name__}: {exc}".strip()
            if detail:
                return f"{ANALYSIS_FAILED_MESSAGE} (debug: {detail})"
        return ANALYSIS_FAILED_MESSAGE
