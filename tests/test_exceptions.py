import unittest
from http import HTTPStatus

from portal.core.exceptions import DuplicateEmail, MutationFailed, NotFound, error_payload


class TestErrorPayload(unittest.TestCase):
    def test_app_error_keeps_code_message_and_details(self):
        exc = NotFound("Service request not found", details={"id": 7})
        self.assertEqual(exc.status_code, HTTPStatus.NOT_FOUND)
        self.assertEqual(
            error_payload(exc),
            {
                "error": {
                    "code": "NotFound",
                    "message": "Service request not found",
                    "details": {"id": 7},
                }
            },
        )

    def test_subclass_reports_its_own_name(self):
        payload = error_payload(DuplicateEmail())
        self.assertEqual(payload["error"]["code"], "DuplicateEmail")
        self.assertEqual(payload["error"]["details"], {})
        self.assertIsInstance(DuplicateEmail(), MutationFailed)

    def test_unexpected_error_is_masked(self):
        payload = error_payload(RuntimeError("connection string leaked"))
        self.assertEqual(payload["error"]["code"], "InternalError")
        self.assertNotIn("leaked", payload["error"]["message"])
        self.assertNotIn("details", payload["error"])
