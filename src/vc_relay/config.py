"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

BUNDLED_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    vc_api_endpoint: str
    vc_api_key: str
    client_name: str = "vc-relay"
    cache_expires_in_seconds: int = 300
    http_timeout_seconds: float = 15
    pin_code_length: int | None = None
    requests_dir: Path = BUNDLED_TEMPLATES_DIR
    presentation_request_file: str = "presentation_request.json"
    issuance_request_file: str = "issuance_request.json"
    public_base_url: str | None = None
    b2c_integration: bool = False
    environment: str = _ENVIRONMENT
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_base_url(
    public_base_url: str | None, original_host: str | None, host: str
) -> str:
    """Return the externally visible scheme and host for callback URLs."""
    if public_base_url:
        return public_base_url.rstrip("/")
    if original_host:
        return f"https://{original_host}"
    return f"https://{host}"
