#!/usr/bin/env python3
"""Render nameplate previews and summary PDFs from saved templates."""

from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

from dotenv import load_dotenv

from domain_data import ValidationError, parse_submission, parse_templates
from domain_types import LabelTemplate
from logging_setup import setup_logging
from plate_layout import render_plate_png
from settings import load_settings
from storage_api import PdfStorage
from submission import SubmissionError, build_summary_items, process_submission
from summary_generation import render_summary, summary_page_count
from webhook_api import WebhookNotifier


def _load_payload(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except OSError as exc:
        raise SystemExit(f"Cannot read '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SystemExit(f"'{path}' is not valid JSON: {exc}") from exc


def _templates_from_payload(payload: Any) -> tuple[LabelTemplate, ...]:
    raw = payload
    if isinstance(payload, dict):
        raw = payload.get("templates") or payload.get("savedTemplates") or []
    try:
        templates = parse_templates(raw)
    except ValidationError as exc:
        raise SystemExit(str(exc)) from exc
    if not templates:
        raise SystemExit("No templates found in the input file.")
    return templates


def write_previews(
    templates: Sequence[LabelTemplate],
    prefix: str,
    device_pixel_ratio: float,
) -> str:
    """Render each template as a standalone PNG."""

    for i, template in enumerate(templates):
        png_bytes = render_plate_png(template, device_pixel_ratio=device_pixel_ratio)
        png_name = f"{prefix}_{(i + 1):02d}.png"
        with open(png_name, "wb") as handle:
            handle.write(png_bytes)

    return f"Wrote {len(templates)} PNG files with prefix '{prefix}_'."


def write_summary(
    templates: Sequence[LabelTemplate],
    output_path: str,
    reference_id: str,
    title: Optional[str],
) -> str:
    pdf_bytes = render_summary(
        title,
        reference_id,
        datetime.now(timezone.utc),
        build_summary_items(tuple(templates)),
    )
    Path(output_path).write_bytes(pdf_bytes)
    pages = summary_page_count(len(templates))
    return f"Wrote {output_path} ({pages} page{'s' if pages != 1 else ''})"


def submit(payload: Any) -> str:
    """Validate and forward a full submission using environment settings."""

    try:
        submission = parse_submission(payload)
    except ValidationError as exc:
        raise SystemExit(f"Invalid submission: {exc}") from exc

    settings = load_settings()
    if not settings.webhook_url:
        raise SystemExit(
            "NAMEPLATE_WEBHOOK_URL is not configured (environment/.env)."
        )
    notifier = WebhookNotifier(settings.webhook_url, timeout=settings.webhook_timeout)
    storage = (
        PdfStorage(settings.s3_bucket, region=settings.aws_region)
        if settings.s3_bucket
        else None
    )

    try:
        result = process_submission(submission, notifier, storage)
    except SubmissionError as exc:
        raise SystemExit(f"Submission failed ({exc.kind}): {exc}") from exc

    location = result.pdf_url or "not stored"
    return f"Submitted {result.reference_id}; summary PDF: {location}"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for nameplate rendering."""

    parser = argparse.ArgumentParser(
        description="Nameplate templates (JSON) -> previews and summary PDF"
    )
    parser.add_argument(
        "input",
        help="JSON file with a list of templates or a submission object.",
    )
    parser.add_argument(
        "-o", "--output",
        default="nameplate_summary.pdf",
        help="Summary PDF path (default: nameplate_summary.pdf).",
    )
    parser.add_argument(
        "-r", "--reference-id",
        default="",
        help="Reference ID printed in the summary header and footer.",
    )
    parser.add_argument("-t", "--title", help="Summary title.")
    parser.add_argument(
        "-p", "--previews",
        metavar="PREFIX",
        help="Also write one PNG preview per template using this prefix.",
    )
    parser.add_argument(
        "--dpr",
        type=float,
        default=1.0,
        help="Device pixel ratio for PNG previews (default: 1).",
    )
    parser.add_argument(
        "--submit",
        action="store_true",
        help="Send the submission to the configured webhook instead of writing files.",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging.")

    args = parser.parse_args(argv)
    setup_logging(args.debug)

    payload = _load_payload(args.input)

    if args.submit:
        print(submit(payload))
        return 0

    templates = _templates_from_payload(payload)
    reference_id = args.reference_id
    if not reference_id and isinstance(payload, dict):
        reference_id = str(payload.get("referenceId") or "")

    if args.previews:
        print(write_previews(templates, args.previews, args.dpr))
    print(write_summary(templates, args.output, reference_id, args.title))
    return 0


if __name__ == "__main__":

    load_dotenv()

    main()
