import json
import re
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_list(raw: Any) -> list[str] | None:
    """Split a raw env value into items, or return None for an empty value.

    Accepts a real list, a JSON array, a JSON string, or a comma/whitespace
    separated string.
    """
    if raw is None:
        return None
    if isinstance(raw, list):
        items = [str(v).strip() for v in raw]
        return [v for v in items if v]

    raw = str(raw).strip()
    if not raw or raw == "[]":
        return None

    # Prefer JSON (recommended format), but tolerate non-JSON values to avoid
    # crashing the app on misconfigured deployments.
    if raw.startswith(("[", "{", '"', "'")):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            items = [str(v).strip() for v in parsed]
            return [v for v in items if v]
        if isinstance(parsed, str):
            raw = parsed.strip()
            if not raw or raw == "[]":
                return None

    return [p for p in re.split(r"[,\s]+", raw) if p]


def _parse_cors_origins(raw: Any) -> list[str]:
    parts = _split_list(raw)
    if not parts:
        return []

    origins: list[str] = []
    for part in parts:
        if part == "*":
            return ["*"]
        if "://" in part:
            origins.append(part)
            continue
        # If a host is provided without scheme, support both HTTP and HTTPS
        # origins. Browsers include the scheme in the Origin header.
        origins.append(f"http://{part}")
        origins.append(f"https://{part}")

    # Deduplicate while preserving order.
    seen: set[str] = set()
    result: list[str] = []
    for origin in origins:
        if origin in seen:
            continue
        seen.add(origin)
        result.append(origin)
    return result


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Debug mode - enables detailed error responses
    debug: bool = False

    # Deployment environment reported by /health
    app_env: str = "development"

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    # CORS settings
    # Use NoDecode so misconfigured values (e.g. "203.0.113.7") don't crash JSON
    # parsing at startup.
    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "https://nanjilmepservice.com",
        "https://www.nanjilmepservice.com",
    ]
    cors_max_age: int = 3600  # Cache preflight requests for 1 hour

    # Rate limiting settings (fixed window)
    rate_limit_enabled: bool = True
    rate_limit_window_ms: int = 15 * 60 * 1000
    rate_limit_max_requests: int = 100
    rate_limit_message: str = "Too many requests"
    rate_limit_path_prefixes: Annotated[list[str], NoDecode] = ["/api"]
    rate_limit_max_entries: int | None = None  # None = unbounded
    rate_limit_sweep_interval_seconds: int = 300  # 0 disables the periodic sweep

    # Dispatch estimation
    dispatch_average_speed_kmh: float = 25.0

    # Photo storage
    upload_dir: str = "./uploads/photos"
    upload_url_prefix: str = "/uploads/photos"
    upload_max_bytes: int = 10 * 1024 * 1024

    # Admin access fallback list, used when the identity provider has no role claim
    admin_emails: Annotated[list[str], NoDecode] = []

    @field_validator("cors_origins", mode="before")
    @classmethod
    def decode_cors_origins(cls, v: Any) -> list[str]:
        return _parse_cors_origins(v)

    @field_validator("rate_limit_path_prefixes", mode="before")
    @classmethod
    def decode_path_prefixes(cls, v: Any) -> list[str]:
        return _split_list(v) or []

    @field_validator("admin_emails", mode="before")
    @classmethod
    def decode_admin_emails(cls, v: Any) -> list[str]:
        return [email.lower() for email in (_split_list(v) or [])]

    @field_validator("rate_limit_window_ms", "rate_limit_max_requests")
    @classmethod
    def validate_rate_limit_positive(cls, v: int) -> int:
        """Validate rate limit values are positive."""
        if v < 1:
            raise ValueError("Rate limit values must be at least 1")
        return v

    @field_validator("rate_limit_max_entries")
    @classmethod
    def validate_max_entries(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("rate_limit_max_entries must be at least 1")
        return v

    @field_validator("rate_limit_sweep_interval_seconds")
    @classmethod
    def validate_sweep_interval(cls, v: int) -> int:
        if v < 0:
            raise ValueError("rate_limit_sweep_interval_seconds must not be negative")
        return v

    @field_validator("dispatch_average_speed_kmh")
    @classmethod
    def validate_speed_positive(cls, v: float) -> float:
        """Validate the assumed travel speed is positive."""
        if v <= 0:
            raise ValueError("dispatch_average_speed_kmh must be positive")
        return v

    @field_validator("upload_max_bytes")
    @classmethod
    def validate_upload_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("upload_max_bytes must be at least 1")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
