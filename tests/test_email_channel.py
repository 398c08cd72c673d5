"""Unit tests for the SendGrid and logging delivery channels."""

from __future__ import annotations

import json
import types

import anyio
import pytest

from finpipe.config import NotificationConfig
from finpipe.domain.entities import DeliveryErrorCode, RenderedMessage
from finpipe.domain.errors import DeliveryFailure
from finpipe.infrastructure import email as email_module
from finpipe.infrastructure.email import (
    LoggingDeliveryChannel,
    SendGridDeliveryChannel,
    build_delivery_channel,
    classify_delivery_error,
)

MESSAGE = RenderedMessage(
    subject="Investment Request Received - Gold Plan",
    html="<p>Hello</p>",
    text="Hello",
    reply_to="alice@example.com",
)


def _config(**overrides) -> NotificationConfig:
    values = {
        "sender_email": "noreply@example.com",
        "sender_name": "Everest Global Holdings",
        "admin_email": "admin@example.com",
        "api_key": "SG.fake",
    }
    values.update(overrides)
    return NotificationConfig(**values)


class RecordingClient:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response or types.SimpleNamespace(status_code=202, body=None)
        self.error = error
        self.messages = []

    def send(self, message):
        self.messages.append(message)
        if self.error is not None:
            raise self.error
        return self.response


class FakeSendGridError(Exception):
    def __init__(self, status_code, body) -> None:
        super().__init__(f"HTTP Error {status_code}")
        self.status_code = status_code
        self.body = body


def _send(channel, to="bob@example.com", message=MESSAGE) -> None:
    anyio.run(channel.send, to, message)


def test_successful_send_builds_full_mail() -> None:
    client = RecordingClient()
    channel = SendGridDeliveryChannel(_config(), client=client)

    _send(channel)

    payload = client.messages[0].get()
    assert payload["from"] == {"email": "noreply@example.com", "name": "Everest Global Holdings"}
    assert payload["reply_to"] == {"email": "alice@example.com"}
    assert payload["subject"] == MESSAGE.subject
    assert payload["personalizations"][0]["to"] == [{"email": "bob@example.com"}]
    assert {item["type"] for item in payload["content"]} == {"text/plain", "text/html"}


def test_reply_to_is_omitted_when_absent() -> None:
    client = RecordingClient()
    channel = SendGridDeliveryChannel(_config(), client=client)

    _send(channel, message=RenderedMessage(subject="s", html="<p>h</p>", text="t"))

    assert "reply_to" not in client.messages[0].get()


def test_forbidden_error_is_classified_with_details() -> None:
    body = json.dumps(
        {
            "errors": [
                {
                    "message": "The from address does not match a verified Sender Identity.",
                    "help": "https://sendgrid.com/docs/for-developers/sending-email/sender-identity/",
                }
            ]
        }
    )
    channel = SendGridDeliveryChannel(
        _config(), client=RecordingClient(error=FakeSendGridError(403, body))
    )

    with pytest.raises(DeliveryFailure) as excinfo:
        _send(channel)

    failure = excinfo.value
    assert failure.code is DeliveryErrorCode.FORBIDDEN
    assert failure.status_code == 403
    assert "verified Sender Identity" in failure.detail
    assert "(help: https://sendgrid.com/docs/" in failure.detail


def test_unsuccessful_response_is_classified() -> None:
    response = types.SimpleNamespace(status_code=429, body=b'{"errors": [{"message": "too many"}]}')
    channel = SendGridDeliveryChannel(_config(), client=RecordingClient(response=response))

    with pytest.raises(DeliveryFailure) as excinfo:
        _send(channel)

    assert excinfo.value.code is DeliveryErrorCode.RATE_LIMITED
    assert excinfo.value.detail == "SendGrid API responded with status 429: too many"


def test_network_errors_are_classified() -> None:
    channel = SendGridDeliveryChannel(
        _config(), client=RecordingClient(error=ConnectionResetError("reset by peer"))
    )

    with pytest.raises(DeliveryFailure) as excinfo:
        _send(channel)

    assert excinfo.value.code is DeliveryErrorCode.NETWORK
    assert excinfo.value.status_code is None


@pytest.mark.parametrize(
    ("status_code", "detail", "expected"),
    [
        (400, None, DeliveryErrorCode.BAD_REQUEST),
        (401, "anything", DeliveryErrorCode.UNAUTHORIZED),
        (403, None, DeliveryErrorCode.FORBIDDEN),
        (413, None, DeliveryErrorCode.PAYLOAD_TOO_LARGE),
        (429, None, DeliveryErrorCode.RATE_LIMITED),
        (502, None, DeliveryErrorCode.PROVIDER_UNAVAILABLE),
        (418, "rate limit exceeded", DeliveryErrorCode.UNKNOWN),
        (None, "Too Many Requests", DeliveryErrorCode.RATE_LIMITED),
        (None, "The provided API key is invalid", DeliveryErrorCode.UNAUTHORIZED),
        (None, "Connection timed out", DeliveryErrorCode.NETWORK),
        (None, "Request entity too large", DeliveryErrorCode.PAYLOAD_TOO_LARGE),
        (None, "something odd", DeliveryErrorCode.UNKNOWN),
        (None, None, DeliveryErrorCode.UNKNOWN),
    ],
)
def test_classify_delivery_error(status_code, detail, expected) -> None:
    assert classify_delivery_error(status_code, detail) is expected


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        (None, None),
        ("", None),
        (b"   ", None),
        ("plain failure", "plain failure"),
        ({"errors": [{"message": "a"}, {"message": "b"}]}, "a; b"),
        ({"unexpected": True}, '{"unexpected": true}'),
        (["x", "y"], "x; y"),
    ],
)
def test_extract_sendgrid_error_details(body, expected) -> None:
    assert email_module._extract_sendgrid_error_details(body) == expected


def test_logging_channel_masks_addresses(caplog) -> None:
    with caplog.at_level("INFO", logger="finpipe.infrastructure.email"):
        _send(LoggingDeliveryChannel(), to="bobby@example.com")

    assert "bo***@example.com" in caplog.text
    assert "al***@example.com" in caplog.text
    assert "bobby@example.com" not in caplog.text
    assert MESSAGE.subject in caplog.text


def test_build_delivery_channel_selection() -> None:
    assert isinstance(build_delivery_channel(_config(api_key=None)), LoggingDeliveryChannel)
    assert isinstance(build_delivery_channel(_config(dev_mode=True)), LoggingDeliveryChannel)
    assert isinstance(build_delivery_channel(_config()), SendGridDeliveryChannel)


def test_sendgrid_channel_requires_api_key() -> None:
    with pytest.raises(ValueError):
        SendGridDeliveryChannel(_config(api_key=None))
