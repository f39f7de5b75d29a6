"""Gateway liveness service entrypoint.

Builds the app from environment settings and serves it with uvicorn.
"""

from liveness.core.app import create_app
from liveness.core.config import settings
from liveness.core.logging_config import setup_logging

logger = setup_logging().bind(module=__name__)

app = create_app()

if __name__ == "__main__":
    import uvicorn

    logger.info(
        "Starting liveness service",
        host=settings.host,
        port=settings.port,
        endpoint=f"/{settings.health_check_endpoint_name}",
        interval=settings.check_interval,
    )
    uvicorn.run(
        "entrypoint:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
