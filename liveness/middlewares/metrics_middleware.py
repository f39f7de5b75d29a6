from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import time

# Request count metric
REQUEST_COUNT = Counter(
    "http_requests_total", "Total number of HTTP requests",
    ["method", "endpoint", "status_code"]
)

# Request duration metric
REQUEST_DURATION = Histogram(
    "http_request_duration_seconds", "Histogram of request processing time",
    ["method", "endpoint"]
)

# Liveness cycle metrics, updated by the cycle runner
DEPENDENCY_UP = Gauge(
    "gateway_dependency_up", "1 if the last probe of the dependency passed, 0 otherwise",
    ["dependency"]
)

CYCLE_DURATION = Histogram(
    "gateway_liveness_cycle_duration_seconds", "Time taken by one full probe cycle"
)

CYCLES_SKIPPED = Counter(
    "gateway_liveness_cycles_skipped_total", "Cycles skipped because the previous one was still running"
)

class PrometheusMiddleware(BaseHTTPMiddleware):
    """Counts and times every request except metric scrapes."""

    def __init__(self, app, skip_paths: tuple[str, ...] = ("/metrics",)):
        super().__init__(app)
        self.skip_paths = skip_paths

    async def dispatch(self, request: Request, call_next):
        endpoint = request.url.path
        if endpoint in self.skip_paths:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, status_code=response.status_code).inc()
        REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(duration)

        return response

# Metrics endpoint handler
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
