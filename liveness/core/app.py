from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from liveness.core.config import AppSettings, settings
from liveness.core.logging_config import setup_logging
from liveness.middlewares.logging_middleware import LoggingMiddleware
from liveness.middlewares.metrics_middleware import PrometheusMiddleware, metrics
from liveness.schemas.health import ErrorResponse
from liveness.services.cycle_runner import CycleRunner
from liveness.services.probes import Probe, build_probe_set, create_http_client, create_redis_client
from liveness.services.reporting import build_report
from liveness.services.scheduler import HealthScheduler
from liveness.services.snapshot_store import SnapshotStore

logger = setup_logging()

def create_app(app_settings: AppSettings | None = None, probes: list[Probe] | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    *probes* replaces the probe set built from settings, which lets callers run
    the liveness machinery against their own dependency checks.
    """
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application startup...")
        redis_client = None
        http_client = None
        probe_set = probes
        if probe_set is None:
            # Configuration is read once here; later changes need a restart
            redis_client = create_redis_client(app_settings)
            if app_settings.control_plane_enabled:
                http_client = create_http_client(app_settings)
            probe_set = build_probe_set(app_settings, redis_client, http_client)

        runner = CycleRunner(probe_set, app.state.snapshot_store, app_settings.probe_timeout)
        scheduler = HealthScheduler(runner, app_settings.check_interval)
        app.state.cycle_runner = runner
        app.state.scheduler = scheduler
        scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()
            if http_client is not None:
                await http_client.aclose()
            if redis_client is not None:
                await redis_client.aclose()
            logger.info("Application shutdown...")

    app = FastAPI(title=app_settings.app_name, debug=app_settings.debug, lifespan=lifespan)
    app.state.snapshot_store = SnapshotStore()

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(PrometheusMiddleware)

    @app.get("/metrics")
    async def get_metrics():
        return await metrics()

    @app.get("/status")
    async def status():
        return {"status": "Application is running"}

    async def liveness(request: Request):
        if request.method != "GET":
            return JSONResponse(content=ErrorResponse(error="Method Not Allowed").model_dump(), status_code=405)

        report = build_report(request.app.state.snapshot_store.current(), app_settings.version, app_settings.description)
        # Always 200: dependency trouble is reported in the payload status
        return JSONResponse(content=report.to_wire(), status_code=200)

    # No method filter: the handler answers every verb, including unknown ones
    app.add_route(f"/{app_settings.health_check_endpoint_name.strip('/')}", liveness, methods=None)

    return app
