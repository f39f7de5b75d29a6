import asyncio
import ssl
from abc import ABC, abstractmethod

import httpx
import redis.asyncio as aioredis

from liveness.core.config import AppSettings
from liveness.core.logging_config import setup_logging
from liveness.schemas.health import ComponentKind, HealthStatus, ProbeResult, utcnow

logger = setup_logging()

LIVENESS_KEY = "tyk-liveness-probe"
MARKER_TTL = 10  # seconds


class Probe(ABC):
    """A named check of one dependency.

    Subclasses implement `check`, which raises when the dependency is unhealthy.
    `run` wraps it so that a probe never raises: every error, including a
    timeout, is turned into a `fail` result.
    """

    name: str
    component_kind: ComponentKind

    @abstractmethod
    async def check(self) -> None:
        pass

    def describe_error(self, error: Exception) -> str:
        return str(error) or type(error).__name__

    async def run(self, timeout: float | None = None) -> ProbeResult:
        try:
            await asyncio.wait_for(self.check(), timeout)
        except asyncio.TimeoutError as e:
            output = f"timed out after {timeout:g}s" if timeout else self.describe_error(e)
        except Exception as e:
            output = self.describe_error(e)
        else:
            return ProbeResult(status=HealthStatus.PASS, component_kind=self.component_kind, observed_at=utcnow())

        logger.error("Health check failed", dependency=self.name, liveness_check=True, error=output)
        return ProbeResult(
            status=HealthStatus.FAIL,
            output=output,
            component_kind=self.component_kind,
            observed_at=utcnow(),
        )


class StoreProbe(Probe):
    """Writes a short-lived marker key into the key-value store."""

    name = "redis"
    component_kind = ComponentKind.DATASTORE

    def __init__(self, client: aioredis.Redis, key_prefix: str = "livenesscheck-"):
        self.client = client
        self.key = f"{key_prefix}{LIVENESS_KEY}"

    async def check(self) -> None:
        await self.client.set(self.key, self.key, ex=MARKER_TTL)


class ControlPlaneProbe(Probe):
    """Sends a liveness request to the control-plane service."""

    name = "dashboard"
    component_kind = ComponentKind.SYSTEM

    def __init__(self, client: httpx.AsyncClient, ping_path: str = "/hello", node_secret: str | None = None):
        self.client = client
        self.ping_path = ping_path
        self.node_secret = node_secret

    async def check(self) -> None:
        headers = {"authorization": self.node_secret} if self.node_secret else {}
        response = await self.client.get(self.ping_path, headers=headers)
        response.raise_for_status()


class RpcProbe(Probe):
    """Opens, then closes, a fresh connection to the RPC endpoint."""

    name = "rpc"
    component_kind = ComponentKind.SYSTEM

    def __init__(self, connection_string: str, use_ssl: bool = False, insecure_skip_verify: bool = False):
        self.connection_string = connection_string
        self.use_ssl = use_ssl
        self.insecure_skip_verify = insecure_skip_verify

    def _address(self) -> tuple[str, int]:
        host, sep, port = self.connection_string.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError(f"invalid RPC address {self.connection_string!r}, expected host:port")
        return host.strip("[]"), int(port)

    def _ssl_context(self) -> ssl.SSLContext | None:
        if not self.use_ssl:
            return None
        context = ssl.create_default_context()
        if self.insecure_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    async def check(self) -> None:
        host, port = self._address()
        _, writer = await asyncio.open_connection(host, port, ssl=self._ssl_context())
        writer.close()
        await writer.wait_closed()

    def describe_error(self, error: Exception) -> str:
        return f"Could not connect to RPC: {super().describe_error(error)}"


def create_redis_client(settings: AppSettings) -> aioredis.Redis:
    return aioredis.from_url(
        settings.redis_url,
        socket_timeout=settings.probe_timeout,
        socket_connect_timeout=settings.probe_timeout,
    )


def create_http_client(settings: AppSettings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.dashboard_url,
        timeout=httpx.Timeout(settings.probe_timeout),
    )


def build_probe_set(
    settings: AppSettings,
    redis_client: aioredis.Redis | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> list[Probe]:
    """Return the probes enabled by *settings*.

    The store probe is always present. The control-plane and RPC probes are
    only added when the gateway is configured to use those dependencies.
    """
    probes: list[Probe] = [
        StoreProbe(redis_client or create_redis_client(settings), settings.redis_key_prefix),
    ]

    if settings.control_plane_enabled:
        probes.append(ControlPlaneProbe(
            http_client or create_http_client(settings),
            ping_path=settings.dashboard_ping_path,
            node_secret=settings.node_secret,
        ))

    if settings.rpc_enabled:
        probes.append(RpcProbe(
            settings.rpc_connection_string,
            use_ssl=settings.rpc_use_ssl,
            insecure_skip_verify=settings.rpc_ssl_insecure_skip_verify,
        ))

    logger.info("Liveness probes configured", probes=[p.name for p in probes])
    return probes
