"""End-to-end tests for composing and sending through a mocked Mandrill API."""

import json

import pytest
import respx
from httpx import Response
from structlog.testing import capture_logs

from mandrill_mailer.mailer.mailer import Mailer, MailerState

API_URL = "https://mandrillapp.test/api/1.0"


@pytest.mark.integration
class TestSendFlow:
    """Compose, send and interpret in one pass."""

    @respx.mock
    def test_template_compose_and_send(self, mock_settings):
        """Test a Mandrill template rendered and delivered to several recipients."""
        respx.post(f"{API_URL}/templates/render.json").mock(
            return_value=Response(200, json={"html": "<h1>Order 42 shipped</h1>"})
        )
        send_route = respx.post(f"{API_URL}/messages/send.json").mock(
            return_value=Response(
                200,
                json=[
                    {"email": "a@x.com", "status": "sent", "_id": "1"},
                    {"email": "b@x.com", "status": "scheduled", "_id": "2"},
                ],
            )
        )

        with Mailer(api_key="  live-key  ", settings=mock_settings) as mailer:
            message = mailer.compose("shipped", {"order": 42})
            message.to = ["a@x.com"]
            message.bcc = ["b@x.com"]
            message.subject = "Your order shipped"
            message.tags = ["orders"]

            with capture_logs() as logs:
                assert mailer.send(message) is True

            assert mailer.state is MailerState.READY

        payload = json.loads(send_route.calls.last.request.content)
        assert payload["key"] == "live-key"
        assert payload["message"] == {
            "subject": "Your order shipped",
            "to": [
                {"email": "a@x.com", "type": "to"},
                {"email": "b@x.com", "type": "bcc"},
            ],
            "html": "<h1>Order 42 shipped</h1>",
            "from_email": "noreply@example.com",
            "from_name": "Example",
            "tags": ["orders"],
            "preserve_recipients": False,
        }

        info = [entry["event"] for entry in logs if entry["log_level"] == "info"]
        assert info == ["Sending email", "Email sent", "Email submission scheduled"]

    @respx.mock
    def test_provider_outage_then_recovery(self, mock_settings, sample_message):
        """Test a failed call does not poison the mailer for later sends."""
        respx.post(f"{API_URL}/messages/send.json").mock(
            side_effect=[
                Response(
                    500,
                    json={
                        "status": "error",
                        "code": -99,
                        "name": "ServiceUnavailable",
                        "message": "Down for maintenance",
                    },
                ),
                Response(
                    200,
                    json=[
                        {"email": "a@x.com", "status": "queued"},
                        {"email": "b@x.com", "status": "queued"},
                    ],
                ),
            ]
        )

        with Mailer(api_key="live-key", settings=mock_settings) as mailer:
            with capture_logs() as logs:
                assert mailer.send(sample_message) is False

            errors = [entry for entry in logs if entry["log_level"] == "error"]
            assert len(errors) == 1
            assert errors[0]["error_type"] == "ServiceUnavailableError"
            assert not [entry for entry in logs if "recipient" in entry]

            assert mailer.send(sample_message) is True
            assert len(respx.calls) == 2

    @respx.mock
    def test_view_fallback_text_only(self, mock_settings):
        """Test a text-only local view is sent when Mandrill cannot render."""
        respx.post(f"{API_URL}/templates/render.json").mock(
            return_value=Response(
                500,
                json={"status": "error", "code": 5, "name": "Unknown_Template", "message": "x"},
            )
        )
        send_route = respx.post(f"{API_URL}/messages/send.json").mock(
            return_value=Response(200, json=[{"email": "a@x.com", "status": "sent"}])
        )

        with Mailer(api_key="live-key", settings=mock_settings) as mailer:
            message = mailer.compose("receipt", {"total": "9.99"})
            message.to = ["a@x.com"]

            assert mailer.send(message) is True

        sent = json.loads(send_route.calls.last.request.content)["message"]
        assert sent["text"] == "Total: 9.99"
        assert "html" not in sent
