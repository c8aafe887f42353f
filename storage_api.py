"""S3 storage for rendered summary PDFs."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import boto3

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
KEY_PREFIX = "nameplates"


def build_object_key(reference_id: str, created_at: datetime | None = None) -> str:
    """Return ``nameplates/<reference>/<UTC timestamp>.pdf``."""

    stamp = (created_at or datetime.now(timezone.utc)).astimezone(timezone.utc)
    safe_ref = re.sub(r"[^A-Za-z0-9._-]+", "-", reference_id.strip()).strip("-") or "unknown"
    return f"{KEY_PREFIX}/{safe_ref}/{stamp.strftime('%Y%m%dT%H%M%SZ')}.pdf"


@dataclass
class PdfStorage:
    """Uploads PDFs to a public-read S3 bucket."""

    bucket: str
    region: str = DEFAULT_REGION
    client: Any = None

    def __post_init__(self) -> None:
        if not self.bucket:
            raise RuntimeError("Missing S3 bucket configuration for PDF uploads")
        self.region = self.region or DEFAULT_REGION
        if self.client is None:
            self.client = boto3.session.Session(region_name=self.region).client("s3")

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def put_pdf(
        self,
        key: str,
        buffer: bytes,
        content_type: str = "application/pdf",
    ) -> str:
        """Store ``buffer`` under ``key`` and return its public URL."""

        if not buffer:
            raise ValueError("Missing PDF buffer")

        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=buffer,
            ContentType=content_type,
            ACL="public-read",
        )
        url = self.public_url(key)
        logger.info("Uploaded %d bytes to %s", len(buffer), url)
        return url
