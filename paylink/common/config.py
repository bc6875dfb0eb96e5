"""Central environment-driven settings shared by the checkout API and web app.

Each process loads this once at startup. Behavior is controlled by environment
variables (see `.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "paylink"
    log_level: str = "INFO"
    database_url: str
    checkout_api_url: str = "http://localhost:4000"
    checkout_port: int = 4000
    web_port: int = 3000
    cors_allow_origins: list[str] = ["*"]
    # Empty disables span export.
    otel_exporter_otlp_endpoint: str = ""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
