import unittest
from datetime import datetime, timezone
from io import BytesIO
from unittest.mock import Mock

import httpx
from botocore.exceptions import ClientError
from PIL import Image

from domain_data import parse_submission, parse_templates
from storage_api import PdfStorage, build_object_key
from submission import (
    NotificationError,
    StorageError,
    build_summary_items,
    process_submission,
)
from webhook_api import WebhookError, WebhookNotifier


def _submission():
    return parse_submission(
        {
            "referenceId": "PO-1001",
            "contact": {"name": "Jane Smith", "email": "jane@example.com"},
            "templates": [
                {"lines": [{"text": "JOHN DOE", "fontSizePt": 22}], "quantity": 2},
                {"lines": [{"text": "FRONT DESK", "fontSizePt": 18}]},
            ],
        }
    )


class SummaryItemTests(unittest.TestCase):
    def test_large_plate_thumbnail_is_bounded(self) -> None:
        templates = parse_templates(
            [{"heightInches": 40, "widthInches": 60, "lines": [{"text": "LOBBY", "fontSizePt": 28}]}]
        )
        (item,) = build_summary_items(templates)
        image = Image.open(BytesIO(item.preview_image))
        width, height = image.size
        self.assertLessEqual(width, 360)
        self.assertLess(width * height, 200_000)

    def test_client_preview_is_kept(self) -> None:
        templates = parse_templates([{"previewPng": "data:image/png;base64,iVBORw0KGgo="}])
        (item,) = build_summary_items(templates)
        self.assertEqual(item.preview_image, b"\x89PNG\r\n\x1a\n")


class ProcessSubmissionTests(unittest.TestCase):
    def test_uploads_then_notifies(self) -> None:
        notifier = Mock(spec=WebhookNotifier)
        storage = Mock(spec=PdfStorage)
        storage.put_pdf.return_value = "https://bucket.s3.us-east-1.amazonaws.com/x.pdf"

        result = process_submission(
            _submission(),
            notifier,
            storage,
            request_meta={"userAgent": "tests", "referer": "https://shop.example"},
        )

        key, pdf_bytes = storage.put_pdf.call_args.args
        self.assertTrue(key.startswith("nameplates/PO-1001/"))
        self.assertTrue(pdf_bytes.startswith(b"%PDF"))

        payload = notifier.send.call_args.args[0]
        self.assertEqual(payload["referenceId"], "PO-1001")
        self.assertEqual(payload["contact"]["email"], "jane@example.com")
        self.assertEqual(len(payload["templates"]), 2)
        self.assertEqual(payload["templates"][0]["quantity"], 2)
        self.assertEqual(payload["pdfUrl"], storage.put_pdf.return_value)
        self.assertEqual(payload["_meta"]["source"], "nameplate-label-creator")
        self.assertEqual(payload["_meta"]["userAgent"], "tests")

        self.assertEqual(result.reference_id, "PO-1001")
        self.assertEqual(result.pdf_url, storage.put_pdf.return_value)
        self.assertEqual(result.page_count, 1)

    def test_without_storage(self) -> None:
        notifier = Mock(spec=WebhookNotifier)
        result = process_submission(_submission(), notifier)
        self.assertIsNone(result.pdf_url)
        self.assertIsNone(notifier.send.call_args.args[0]["pdfUrl"])

    def test_storage_failure_skips_webhook(self) -> None:
        notifier = Mock(spec=WebhookNotifier)
        storage = Mock(spec=PdfStorage)
        storage.put_pdf.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )

        with self.assertRaises(StorageError):
            process_submission(_submission(), notifier, storage)
        notifier.send.assert_not_called()

    def test_webhook_failure_is_reported(self) -> None:
        notifier = Mock(spec=WebhookNotifier)
        notifier.send.side_effect = WebhookError("Webhook error", status=503, body="busy")
        storage = Mock(spec=PdfStorage)
        storage.put_pdf.return_value = "https://example/x.pdf"

        with self.assertRaises(NotificationError) as ctx:
            process_submission(_submission(), notifier, storage)
        self.assertEqual(ctx.exception.status, 503)
        self.assertEqual(ctx.exception.body, "busy")
        self.assertEqual(notifier.send.call_count, 1)
        storage.put_pdf.assert_called_once()


class WebhookNotifierTests(unittest.TestCase):
    def test_posts_json_once(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "success"})

        notifier = WebhookNotifier("https://hooks.example/abc", transport=httpx.MockTransport(handler))
        self.assertEqual(notifier.send({"referenceId": "R"}), 200)
        self.assertEqual(len(seen), 1)
        self.assertEqual(seen[0].method, "POST")
        self.assertIn(b'"referenceId"', seen[0].content)

    def test_non_success_status(self) -> None:
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(500, text="upstream broke")

        notifier = WebhookNotifier("https://hooks.example/abc", transport=httpx.MockTransport(handler))
        with self.assertRaises(WebhookError) as ctx:
            notifier.send({})
        self.assertEqual(ctx.exception.status, 500)
        self.assertEqual(ctx.exception.body, "upstream broke")
        self.assertEqual(len(calls), 1)

    def test_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        notifier = WebhookNotifier("https://hooks.example/abc", transport=httpx.MockTransport(handler))
        with self.assertRaises(WebhookError) as ctx:
            notifier.send({})
        self.assertIsNone(ctx.exception.status)

    def test_requires_url(self) -> None:
        with self.assertRaises(RuntimeError):
            WebhookNotifier("  ")


class PdfStorageTests(unittest.TestCase):
    def test_put_pdf_uses_public_read(self) -> None:
        client = Mock()
        storage = PdfStorage("labels-bucket", region="eu-west-1", client=client)
        url = storage.put_pdf("nameplates/R/1.pdf", b"%PDF-1.4")

        client.put_object.assert_called_once_with(
            Bucket="labels-bucket",
            Key="nameplates/R/1.pdf",
            Body=b"%PDF-1.4",
            ContentType="application/pdf",
            ACL="public-read",
        )
        self.assertEqual(url, "https://labels-bucket.s3.eu-west-1.amazonaws.com/nameplates/R/1.pdf")

    def test_put_pdf_requires_buffer(self) -> None:
        storage = PdfStorage("labels-bucket", client=Mock())
        with self.assertRaises(ValueError):
            storage.put_pdf("k", b"")

    def test_requires_bucket(self) -> None:
        with self.assertRaises(RuntimeError):
            PdfStorage("", client=Mock())

    def test_object_key(self) -> None:
        key = build_object_key("PO 1001/ä", datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))
        self.assertEqual(key, "nameplates/PO-1001/20240501T120000Z.pdf")


if __name__ == "__main__":
    unittest.main()
