"""Render, store and forward a validated nameplate submission."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from botocore.exceptions import BotoCoreError, ClientError

from domain_data import template_to_payload, template_to_summary_item
from domain_types import LabelTemplate, Submission
from label_types import SummaryItem
from plate_layout import render_plate_png
from storage_api import PdfStorage, build_object_key
from summary_generation import render_summary, summary_page_count
from webhook_api import WebhookError, WebhookNotifier

logger = logging.getLogger(__name__)

SOURCE_NAME = "nameplate-label-creator"
THUMBNAIL_PADDING = 12
# Thumbnails are drawn into a ~94pt cell, so cap them at the smallest preview width.
THUMBNAIL_WIDTH = 360


class SubmissionError(RuntimeError):
    """Base class for upstream failures during a submission."""

    kind = "submission"


class StorageError(SubmissionError):
    kind = "storage"


class NotificationError(SubmissionError):
    kind = "notification"

    def __init__(self, message: str, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


@dataclass(frozen=True)
class SubmissionResult:
    reference_id: str
    pdf_url: str | None
    page_count: int


def build_summary_items(templates: tuple[LabelTemplate, ...]) -> list[SummaryItem]:
    """One row per template, rendering thumbnails the client did not send."""

    items: list[SummaryItem] = []
    for index, template in enumerate(templates):
        preview = template.preview_png
        if preview is None:
            preview = render_plate_png(
                template,
                container_width=THUMBNAIL_WIDTH,
                padding=THUMBNAIL_PADDING,
            )
        items.append(template_to_summary_item(template, index, preview))
    return items


def build_webhook_payload(
    submission: Submission,
    pdf_url: str | None,
    received_at: datetime,
    request_meta: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    meta = request_meta or {}
    return {
        "referenceId": submission.reference_id,
        "contact": {
            "name": submission.contact.name,
            "email": submission.contact.email,
        },
        "templates": [template_to_payload(t) for t in submission.templates],
        "pdfUrl": pdf_url,
        "_meta": {
            "source": SOURCE_NAME,
            "receivedAt": received_at.isoformat(),
            "userAgent": meta.get("userAgent", ""),
            "referer": meta.get("referer", ""),
        },
    }


def process_submission(
    submission: Submission,
    notifier: WebhookNotifier,
    storage: PdfStorage | None = None,
    request_meta: Mapping[str, str] | None = None,
    title: str | None = None,
) -> SubmissionResult:
    """Render the summary PDF, upload it and notify the webhook once.

    A storage failure stops before the webhook is called.  A webhook failure
    after a successful upload leaves the PDF in place.
    """

    received_at = datetime.now(timezone.utc)
    items = build_summary_items(submission.templates)
    pdf_bytes = render_summary(title, submission.reference_id, received_at, items)

    pdf_url: str | None = None
    if storage is not None:
        key = build_object_key(submission.reference_id, received_at)
        try:
            pdf_url = storage.put_pdf(key, pdf_bytes)
        except (BotoCoreError, ClientError, ValueError) as exc:
            logger.error("Upload of %s failed: %s", key, exc)
            raise StorageError(f"Failed to store summary PDF: {exc}") from exc

    payload = build_webhook_payload(submission, pdf_url, received_at, request_meta)
    try:
        notifier.send(payload)
    except WebhookError as exc:
        raise NotificationError(str(exc), status=exc.status, body=exc.body) from exc

    logger.info(
        "Submission %s forwarded with %d templates",
        submission.reference_id,
        len(submission.templates),
    )
    return SubmissionResult(
        reference_id=submission.reference_id,
        pdf_url=pdf_url,
        page_count=summary_page_count(len(items)),
    )
