"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from sleep_tracker.api.models import SleepNightModel, SleepStateResponse
from sleep_tracker.app_logging import configure_logging
from sleep_tracker.containers import AppContainer
from sleep_tracker.services.formatting import format_time_left
from sleep_tracker.services.sessions import SleepTrackerController


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        controller = app.state.container.create_controller()
        app.state.controller = controller
        await controller.wait_idle()
        logger.info("Sleep tracker ready")
        yield
        await controller.shutdown()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/sleep")
    async def sleep_state(request: Request) -> SleepStateResponse:
        """Return the current session and history."""
        return _state_response(request.app.state.controller, container)

    @app.post("/sleep/start")
    async def start_tracking(request: Request) -> SleepStateResponse:
        """Start tracking a new sleep session."""
        controller: SleepTrackerController = request.app.state.controller
        await _settle(controller.start_tracking())
        return _state_response(controller, container)

    @app.post("/sleep/stop")
    async def stop_tracking(request: Request) -> SleepStateResponse:
        """Stop the session being tracked."""
        controller: SleepTrackerController = request.app.state.controller
        await _settle(controller.stop_tracking())
        return _state_response(controller, container)

    @app.post("/sleep/clear")
    async def clear_history(request: Request) -> SleepStateResponse:
        """Delete all sleep history."""
        controller: SleepTrackerController = request.app.state.controller
        await _settle(controller.clear_history())
        return _state_response(controller, container)

    return app


async def _settle(task: asyncio.Task[None] | None) -> None:
    if task is not None:
        # Request cancellation must not cancel work owned by the controller.
        await asyncio.shield(task)


def _state_response(
    controller: SleepTrackerController, container: AppContainer
) -> SleepStateResponse:
    state = controller.state.value
    time_left = controller.timer.time_left_milli
    return SleepStateResponse(
        tonight=SleepNightModel.from_record(state.tonight) if state.tonight else None,
        nights=[SleepNightModel.from_record(night) for night in state.nights],
        nights_text=controller.nights_text,
        error=str(state.error) if state.error else None,
        start_enabled=state.start_enabled,
        stop_enabled=state.stop_enabled,
        clear_enabled=state.clear_enabled,
        timer_running=controller.timer.running,
        time_left=(
            format_time_left(time_left, container.settings.timer_display_offset_hours)
            if controller.timer.running and time_left is not None
            else None
        ),
    )
