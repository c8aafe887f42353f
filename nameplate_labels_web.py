"""Web endpoints for nameplate previews, summaries and submissions."""

from __future__ import annotations

import argparse
import json
import logging
import math
import os
from datetime import datetime, timezone
from io import BytesIO
from typing import Any

from dotenv import load_dotenv
from flask import Flask, jsonify, request, send_file
from werkzeug.exceptions import MethodNotAllowed
from werkzeug.wrappers import Response

from domain_data import ValidationError, parse_submission, parse_template, parse_templates
from domain_types import (
    ALLOWED_POINT_SIZES,
    COLOR_PALETTES,
    MAX_LINES,
    MIN_LINES,
    CornerStyle,
)
from logging_setup import setup_logging
from plate_layout import in_to_px, render_plate_png
from settings import Settings, load_settings
from storage_api import PdfStorage
from submission import (
    NotificationError,
    StorageError,
    build_summary_items,
    process_submission,
)
from summary_generation import render_summary
from webhook_api import WebhookNotifier

logger = logging.getLogger(__name__)

__all__ = ["run_web_app", "create_app", "create_app_from_env"]

# Previews wider than this are scaled down to fit.
MAX_PREVIEW_WIDTH_PX = 1600


def create_app(
    settings: Settings,
    notifier: WebhookNotifier | None = None,
    storage: PdfStorage | None = None,
) -> Flask:
    """Create the Flask app wired to the provided collaborators."""

    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.secret_key

    if notifier is None and settings.webhook_url:
        notifier = WebhookNotifier(settings.webhook_url, timeout=settings.webhook_timeout)
    if storage is None and settings.s3_bucket:
        storage = PdfStorage(settings.s3_bucket, region=settings.aws_region)

    allowed_origins = set(settings.allowed_origins)

    def _cors_headers() -> dict[str, str]:
        origin = request.headers.get("Origin", "")
        return {
            "Access-Control-Allow-Origin": origin if origin in allowed_origins else "null",
            "Vary": "Origin",
            "Access-Control-Allow-Methods": "POST, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
        }

    def _json(body: dict[str, Any], status: int = 200) -> Response:
        response = jsonify(body)
        response.status_code = status
        response.headers.update(_cors_headers())
        return response

    def _read_json() -> tuple[Any, Response | None]:
        content_type = (request.headers.get("Content-Type") or "").lower()
        if "application/json" not in content_type:
            return None, _json({"error": "Unsupported Media Type"}, 415)
        try:
            return json.loads(request.get_data(as_text=True) or "{}"), None
        except json.JSONDecodeError:
            return None, _json({"error": "Invalid JSON"}, 400)

    def _float_arg(name: str, default: float | None) -> float | None:
        raw = request.args.get(name)
        if not raw:
            return default
        try:
            value = float(raw)
        except ValueError as exc:
            raise ValidationError(f"Query parameter '{name}' must be a number.") from exc
        if not math.isfinite(value):
            raise ValidationError(f"Query parameter '{name}' must be a number.")
        return value

    @app.errorhandler(MethodNotAllowed)
    # pyright: ignore[reportUnusedFunction]
    def method_not_allowed(_exc: MethodNotAllowed) -> Response:
        return _json({"error": "Method not allowed"}, 405)

    @app.route("/options", methods=["GET"])
    # pyright: ignore[reportUnusedFunction]
    def options_index() -> Response:
        return _json(
            {
                "palettes": [
                    {"name": p.name, "bg": p.bg, "fg": p.fg}
                    for p in COLOR_PALETTES.values()
                ],
                "cornerStyles": [c.value for c in CornerStyle],
                "pointSizes": list(ALLOWED_POINT_SIZES),
                "minLines": MIN_LINES,
                "maxLines": MAX_LINES,
            }
        )

    @app.route("/preview", methods=["POST"])
    # pyright: ignore[reportUnusedFunction]
    def preview() -> Response:
        payload, error = _read_json()
        if error is not None:
            return error
        try:
            template = parse_template(payload)
            container_width = _float_arg("width", None)
            dpr = _float_arg("dpr", 1.0) or 1.0
        except ValidationError as exc:
            return _json({"error": "validation", "message": str(exc)}, 400)

        if container_width is None:
            physical = max(in_to_px(template.width_inches), in_to_px(template.height_inches))
            if physical > MAX_PREVIEW_WIDTH_PX:
                container_width = MAX_PREVIEW_WIDTH_PX
        else:
            container_width = min(container_width, MAX_PREVIEW_WIDTH_PX)

        png_bytes = render_plate_png(
            template,
            container_width=container_width,
            device_pixel_ratio=dpr,
        )
        return send_file(BytesIO(png_bytes), mimetype="image/png")

    @app.route("/summary", methods=["POST"])
    # pyright: ignore[reportUnusedFunction]
    def summary() -> Response:
        payload, error = _read_json()
        if error is not None:
            return error
        if not isinstance(payload, dict):
            return _json({"error": "validation", "message": "Request body must be a JSON object."}, 400)
        try:
            templates = parse_templates(payload.get("templates") or [])
        except ValidationError as exc:
            return _json({"error": "validation", "message": str(exc)}, 400)
        if not templates:
            return _json(
                {"error": "validation", "message": "At least one template is required."},
                400,
            )

        title = payload.get("title")
        if title is not None and not isinstance(title, str):
            return _json({"error": "validation", "message": "title must be a string."}, 400)

        reference_id = str(payload.get("referenceId") or "").strip()
        pdf_bytes = render_summary(
            title,
            reference_id,
            datetime.now(timezone.utc),
            build_summary_items(templates),
        )
        return send_file(
            BytesIO(pdf_bytes),
            mimetype="application/pdf",
            as_attachment=True,
            download_name="nameplate_summary.pdf",
        )

    @app.route("/submit", methods=["POST", "OPTIONS"])
    # pyright: ignore[reportUnusedFunction]
    def submit() -> Response:
        if notifier is None:
            return _json({"error": "Server not configured"}, 500)

        if request.method == "OPTIONS":
            response = Response("", status=200)
            response.headers.update(_cors_headers())
            return response

        payload, error = _read_json()
        if error is not None:
            return error

        try:
            submission = parse_submission(payload)
        except ValidationError as exc:
            logger.info("Rejected submission: %s", exc)
            return _json({"error": "validation", "message": str(exc)}, 400)

        request_meta = {
            "userAgent": request.headers.get("User-Agent", ""),
            "referer": request.headers.get("Referer", ""),
        }
        try:
            result = process_submission(submission, notifier, storage, request_meta)
        except StorageError as exc:
            return _json({"error": "storage", "message": str(exc)}, 502)
        except NotificationError as exc:
            if exc.status is None:
                return _json({"error": "Failed to reach webhook"}, 502)
            return _json(
                {"error": "Webhook error", "status": exc.status, "body": exc.body},
                502,
            )

        return _json({"ok": True, "pdfUrl": result.pdf_url})

    return app


def create_app_from_env() -> Flask:
    """Create the Flask app using environment configuration."""
    load_dotenv()
    setup_logging()
    return create_app(load_settings())


def run_web_app(settings: Settings, host: str, port: int) -> None:
    """Launch the Flask development server."""
    app = create_app(settings)

    use_reloader_env = os.getenv("USE_RELOADER")
    use_reloader = (
        str(use_reloader_env).lower() in {"1", "true", "yes", "on"}
        if use_reloader_env is not None
        else True
    )
    app.run(host=host, port=port, debug=False, use_reloader=use_reloader)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the web service."""
    parser = argparse.ArgumentParser(
        description="Nameplate label designer web service"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host/IP for the web service (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=4000,
        help="Port for the web service (default: 4000).",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging.")

    args = parser.parse_args(argv)

    setup_logging(args.debug)
    run_web_app(load_settings(), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    load_dotenv()
    main()
