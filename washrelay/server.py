"""FastAPI relay server.

Endpoints:
- ``POST /webhook``: LINE Messaging API webhook (always answered with 200)
- ``POST /hardware-report`` and ``POST /esp32``: cycle reports from machines
- ``GET /v1/machines``: read-only machine state for operators
- ``GET /health`` and ``GET /metrics``

Events are processed in background tasks after the response is sent, so
neither the platform nor the boards wait on the store or on LINE.

Run with ``uvicorn --factory washrelay.server:create_app`` or ``washrelay serve``.
"""

import json
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.responses import PlainTextResponse

from washrelay import __version__
from washrelay.config import Settings, get_settings
from washrelay.exceptions import StoreError
from washrelay.logging import configure_logging, get_logger
from washrelay.machine import HardwareReport, Policy, ReportPhase
from washrelay.metrics import metrics
from washrelay.middleware import RequestTracingMiddleware
from washrelay.notify import LineMessagingClient, NotificationSender
from washrelay.router import EventRouter
from washrelay.schemas import (
    ErrorResponse,
    HardwareReportAck,
    HardwareReportRequest,
    MachineListResponse,
    MachineView,
    parse_text_events,
)
from washrelay.store import MachineStore, create_store

logger = get_logger(__name__)


def policy_from_settings(settings: Settings) -> Policy:
    """Build the machine policy from configuration."""
    return Policy(
        release_requires_finished=settings.release_requires_finished,
        broadcast_on_finish=settings.broadcast_on_finish,
        broadcast_on_release=settings.broadcast_on_release,
        finish_note=settings.finish_note,
    )


def _validation_message(exc: ValidationError) -> str:
    missing = [str(err["loc"][0]) for err in exc.errors() if err["loc"]]
    if missing:
        return f"resource_id and phase are required (invalid: {', '.join(missing)})"
    return "resource_id and phase are required"


def create_app(
    settings: Settings | None = None,
    store: MachineStore | None = None,
    sender: NotificationSender | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Defaults to ``get_settings()``.
        store: Record store; built from settings when omitted.
        sender: Notification sender; a LINE client when omitted.
    """
    settings = settings or get_settings()
    store = store or create_store(settings)
    sender = sender or LineMessagingClient(
        settings.line_channel_access_token,
        base_url=settings.line_api_base,
        timeout=settings.http_timeout,
    )
    router = EventRouter(store, sender, policy_from_settings(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(
            json_format=not settings.debug,
            level="DEBUG" if settings.debug else settings.log_level,
        )
        logger.info(
            "server_starting",
            version=__version__,
            host=settings.host,
            port=settings.port,
            store_backend=settings.store_backend,
            release_requires_finished=settings.release_requires_finished,
        )
        if not settings.line_channel_access_token:
            logger.warning("line_token_missing")
        await store.start()
        logger.info("store_ready", store=type(store).__name__)
        yield
        await sender.close()
        await store.close()
        logger.info("server_shutdown")

    app = FastAPI(
        title="washrelay",
        description="LINE notification relay for shared washing machines",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.router = router
    app.add_middleware(RequestTracingMiddleware)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    @app.get("/metrics", include_in_schema=False)
    async def get_metrics() -> PlainTextResponse:
        """Return Prometheus-formatted metrics."""
        return PlainTextResponse(
            content=metrics.to_prometheus(),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    @app.get("/metrics/json")
    async def get_metrics_json() -> dict:
        """Return metrics as JSON."""
        return metrics.get_stats()

    @app.post("/webhook")
    async def webhook(request: Request, background_tasks: BackgroundTasks) -> PlainTextResponse:
        """LINE webhook.

        Always answers 200 so the platform does not time out or redeliver;
        the events are handled after the response is sent.
        """
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("webhook_body_invalid")
            return PlainTextResponse("OK")

        events = parse_text_events(body)
        if events:
            background_tasks.add_task(router.handle_webhook_events, events)
        return PlainTextResponse("OK")

    @app.post(
        "/hardware-report",
        response_model=HardwareReportAck,
        responses={400: {"model": ErrorResponse}},
    )
    @app.post("/esp32", include_in_schema=False)
    async def hardware_report(request: Request, background_tasks: BackgroundTasks):
        """Accept a cycle report from a machine's controller.

        Returns 400 when ``resource_id`` or ``phase`` is missing. Unknown
        phases are acknowledged but ignored.
        """
        try:
            payload = HardwareReportRequest.model_validate(await request.json())
        except (json.JSONDecodeError, UnicodeDecodeError):
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": "body must be a JSON object"},
            )
        except ValidationError as e:
            logger.warning("hardware_report_invalid", errors=len(e.errors()))
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": _validation_message(e)},
            )

        try:
            phase = ReportPhase(payload.phase)
        except ValueError:
            logger.warning(
                "hardware_report_unknown_phase",
                machine_id=payload.resource_id,
                phase=payload.phase,
            )
            return HardwareReportAck(accepted=False)

        report = HardwareReport(payload.resource_id, phase)
        background_tasks.add_task(router.dispatch_hardware_report, report)
        return HardwareReportAck(accepted=True)

    @app.get("/v1/machines", response_model=MachineListResponse)
    async def list_machines() -> MachineListResponse:
        """List every known machine and its state."""
        try:
            records = await store.list_all()
        except StoreError as e:
            logger.error("store_failed", error=str(e))
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Machine store unavailable",
            ) from e
        machines = [MachineView.from_record(record) for record in records]
        return MachineListResponse(machines=machines, count=len(machines))

    @app.get("/v1/machines/{machine_id}", response_model=MachineView)
    async def get_machine(machine_id: str) -> MachineView:
        """Get the state of one machine."""
        try:
            record = await store.get(machine_id)
        except StoreError as e:
            logger.error("store_failed", machine_id=machine_id, error=str(e))
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Machine store unavailable",
            ) from e
        if record is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Machine '{machine_id}' not found",
            )
        return MachineView.from_record(record)

    return app
