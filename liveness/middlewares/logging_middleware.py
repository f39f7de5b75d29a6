from liveness.core.logging_config import setup_logging
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
import time
import json

logger = setup_logging()

class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        """Log one line per request, plus the response body at DEBUG."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time": f"{process_time:.4f}s",
        }

        if not logger.isEnabledFor(logging.DEBUG):
            logger.info("Request handled", **log_data)
            return response

        # Body iterator can be consumed only once, so rebuild the response
        response_body = b""
        async for chunk in response.body_iterator:
            response_body += chunk
        response = Response(
            content=response_body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type
        )

        try:
            log_data["body"] = json.loads(response_body.decode("utf-8"))
        except ValueError:
            log_data["body"] = response_body.decode("utf-8", errors="replace")

        logger.debug("Request handled", **log_data)
        return response
