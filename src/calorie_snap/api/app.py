"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from calorie_snap.api.models import (
    CaptureFileRequest,
    CaptureImageRequest,
    DailyTotalsView,
    DashboardView,
    HistoryView,
    NutrientProgressView,
    SessionView,
    TotalsView,
)
from calorie_snap.app_logging import configure_logging
from calorie_snap.containers import AppContainer
from calorie_snap.domain.errors import InvalidTransitionError
from calorie_snap.domain.session import Phase, SessionState
from calorie_snap.services.aggregation import progress


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "CalorieSnap ready: entries=%s",
            len(app.state.container.log_store.entries()),
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition(
        request: Request, exc: InvalidTransitionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/dashboard", response_model=DashboardView)
    async def dashboard(request: Request) -> DashboardView:
        """Return totals, goal progress and logged entries."""
        return _dashboard_view(request.app.state.container)

    @app.get("/history", response_model=HistoryView)
    async def history(request: Request) -> HistoryView:
        """Return per-day totals, newest day first."""
        state_container: AppContainer = request.app.state.container
        days = state_container.aggregation_service.daily_totals(
            state_container.log_store.entries()
        )
        return HistoryView(days=[DailyTotalsView(**asdict(day)) for day in days])

    @app.get("/session", response_model=SessionView)
    async def session(request: Request) -> SessionView:
        return _session_view(request.app.state.container.session_service.state)

    @app.post("/capture", response_model=SessionView)
    async def start_capture(request: Request) -> SessionView:
        """Open the camera or upload view."""
        service = request.app.state.container.session_service
        return _session_view(service.start_capture())

    @app.post("/capture/cancel", response_model=SessionView)
    async def cancel_capture(request: Request) -> SessionView:
        service = request.app.state.container.session_service
        return _session_view(service.cancel_capture())

    @app.post("/capture/image", response_model=SessionView)
    async def capture_image(
        payload: CaptureImageRequest, request: Request
    ) -> SessionView:
        """Submit a photo and wait for its nutrition estimate."""
        service = request.app.state.container.session_service
        image = _normalize_image(payload.image)
        return _session_view(await service.submit_image(image))

    @app.post("/capture/file", response_model=SessionView)
    async def capture_file(
        payload: CaptureFileRequest, request: Request
    ) -> SessionView:
        """Read a chosen photo file and wait for its nutrition estimate."""
        state_container: AppContainer = request.app.state.container
        source = state_container.open_image_file(payload.path)
        return _session_view(await state_container.session_service.capture(source))

    @app.post("/analysis/abandon", response_model=SessionView)
    async def abandon_analysis(request: Request) -> SessionView:
        service = request.app.state.container.session_service
        return _session_view(service.abandon_analysis())

    @app.post("/review/confirm", response_model=DashboardView)
    async def confirm(request: Request) -> DashboardView:
        """Add the reviewed estimate to the log."""
        state_container: AppContainer = request.app.state.container
        state_container.session_service.confirm()
        return _dashboard_view(state_container)

    @app.post("/review/discard", response_model=DashboardView)
    async def discard(request: Request) -> DashboardView:
        state_container: AppContainer = request.app.state.container
        state_container.session_service.discard()
        return _dashboard_view(state_container)

    @app.post("/error/dismiss", response_model=SessionView)
    async def dismiss_error(request: Request) -> SessionView:
        service = request.app.state.container.session_service
        return _session_view(service.dismiss_error())

    @app.post("/entries/{entry_id}/delete", response_model=SessionView)
    async def request_delete(entry_id: str, request: Request) -> SessionView:
        """Ask for confirmation before deleting an entry."""
        state_container: AppContainer = request.app.state.container
        if state_container.log_store.get(entry_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _session_view(state_container.session_service.request_delete(entry_id))

    @app.post("/entries/delete/confirm", response_model=DashboardView)
    async def confirm_delete(request: Request) -> DashboardView:
        state_container: AppContainer = request.app.state.container
        state_container.session_service.confirm_delete()
        return _dashboard_view(state_container)

    @app.post("/entries/delete/cancel", response_model=SessionView)
    async def cancel_delete(request: Request) -> SessionView:
        service = request.app.state.container.session_service
        return _session_view(service.cancel_delete())

    return app


def _session_view(state: SessionState) -> SessionView:
    """Build the session payload for the front-end."""
    return SessionView(
        phase=state.phase,
        error=state.error,
        analysis=state.analysis,
        image=state.image,
        can_confirm=(
            state.phase is Phase.REVIEWING
            and state.analysis is not None
            and state.analysis.is_food
        ),
        pending_delete_id=state.pending_delete_id,
    )


def _dashboard_view(state_container: AppContainer) -> DashboardView:
    """Build the dashboard payload from the log store and goal."""
    entries = state_container.log_store.entries()
    totals = state_container.log_store.totals()
    today = state_container.aggregation_service.today_totals(entries)
    return DashboardView(
        session=_session_view(state_container.session_service.state),
        totals=TotalsView(**asdict(totals)),
        progress=[
            NutrientProgressView(**asdict(item))
            for item in progress(totals, state_container.goal)
        ],
        today=DailyTotalsView(**asdict(today)),
        entries=entries,
        entry_count=len(entries),
    )


def _normalize_image(raw: str) -> str:
    """Strip a data URL prefix and check the payload is base64."""
    image = raw.partition(",")[2] if raw.startswith("data:") else raw
    image = image.strip()
    try:
        base64.b64decode(image, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(
            status_code=422,
            detail="Image must be base64 encoded",
        ) from exc
    if not image:
        raise HTTPException(
            status_code=422,
            detail="Image is empty",
        )
    return image
