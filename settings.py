"""Environment-driven configuration for the web service and CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from storage_api import DEFAULT_REGION
from webhook_api import DEFAULT_TIMEOUT


def _env(*names: str, default: str = "") -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value.strip()
    return default


def _split_origins(value: str) -> tuple[str, ...]:
    return tuple(s.strip() for s in value.split(",") if s.strip())


@dataclass(frozen=True)
class Settings:
    webhook_url: str = ""
    allowed_origins: tuple[str, ...] = field(default_factory=tuple)
    s3_bucket: str = ""
    aws_region: str = DEFAULT_REGION
    webhook_timeout: float = DEFAULT_TIMEOUT
    secret_key: str = "nameplate-labels-ui"


def load_settings() -> Settings:
    """Read settings from the process environment.

    Callers are expected to have run ``load_dotenv()`` already.
    """

    timeout_raw = _env("WEBHOOK_TIMEOUT")
    try:
        timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
    except ValueError as exc:
        raise SystemExit(f"Invalid WEBHOOK_TIMEOUT '{timeout_raw}'") from exc

    return Settings(
        webhook_url=_env("NAMEPLATE_WEBHOOK_URL", "ZAPIER_HOOK_URL_NAMEPLATE"),
        allowed_origins=_split_origins(_env("ALLOWED_ORIGINS")),
        s3_bucket=_env("S3_BUCKET", "PDF_BUCKET", "FILE_BUCKET"),
        aws_region=_env("AWS_REGION", "AWS_DEFAULT_REGION", default=DEFAULT_REGION),
        webhook_timeout=timeout,
        secret_key=_env("FLASK_SECRET_KEY", default="nameplate-labels-ui"),
    )
