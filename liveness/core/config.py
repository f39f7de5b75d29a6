from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CHECK_INTERVAL = 10

class AppSettings(BaseSettings):
    app_name: str = "Gateway-Liveness"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080

    # Reported in the liveness payload
    version: str = "v5.0.0"
    description: str = "Tyk GW"

    # Logging
    log_level: str = "INFO"

    # Liveness endpoint, mounted at "/<name>"
    health_check_endpoint_name: str = "hello"
    liveness_check_interval: int = Field(0, ge=0)  # seconds, 0 falls back to DEFAULT_CHECK_INTERVAL
    probe_timeout: float = Field(5.0, gt=0)  # seconds per probe

    # Key-value store
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "livenesscheck-"

    # Control plane, probed only when app configs come from it
    use_db_app_configs: bool = False
    dashboard_url: str = "http://localhost:3000"
    dashboard_ping_path: str = "/hello"
    node_secret: str | None = None

    # Licensing/RPC channel, probed only when policy_source == "rpc"
    policy_source: str = ""
    rpc_connection_string: str = ""  # host:port
    rpc_use_ssl: bool = False
    rpc_ssl_insecure_skip_verify: bool = False

    model_config = SettingsConfigDict(env_prefix="GW_", env_file=".env", env_file_encoding="utf-8")

    @property
    def check_interval(self) -> int:
        return self.liveness_check_interval or DEFAULT_CHECK_INTERVAL

    @property
    def control_plane_enabled(self) -> bool:
        return self.use_db_app_configs

    @property
    def rpc_enabled(self) -> bool:
        return self.policy_source == "rpc"

# Load settings
settings = AppSettings()
