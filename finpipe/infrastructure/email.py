"""Delivery channels for rendered notification e-mails."""

from __future__ import annotations

import json
import logging
from typing import Any

import anyio
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail, ReplyTo

from finpipe.config import NotificationConfig
from finpipe.domain.entities import DeliveryErrorCode, RenderedMessage
from finpipe.domain.errors import DeliveryFailure
from finpipe.domain.ports import DeliveryChannel
from finpipe.infrastructure.logging_config import mask_email

logger = logging.getLogger(__name__)

STATUS_CODE_ERRORS: dict[int, DeliveryErrorCode] = {
    400: DeliveryErrorCode.BAD_REQUEST,
    401: DeliveryErrorCode.UNAUTHORIZED,
    403: DeliveryErrorCode.FORBIDDEN,
    413: DeliveryErrorCode.PAYLOAD_TOO_LARGE,
    429: DeliveryErrorCode.RATE_LIMITED,
}

# Fallback only; checked in order against the lowercased provider text when
# no status code came back.
DETAIL_PATTERNS: tuple[tuple[str, DeliveryErrorCode], ...] = (
    ("unauthorized", DeliveryErrorCode.UNAUTHORIZED),
    ("api key", DeliveryErrorCode.UNAUTHORIZED),
    ("forbidden", DeliveryErrorCode.FORBIDDEN),
    ("sender identity", DeliveryErrorCode.FORBIDDEN),
    ("too large", DeliveryErrorCode.PAYLOAD_TOO_LARGE),
    ("too many requests", DeliveryErrorCode.RATE_LIMITED),
    ("rate limit", DeliveryErrorCode.RATE_LIMITED),
    ("service unavailable", DeliveryErrorCode.PROVIDER_UNAVAILABLE),
    ("internal server error", DeliveryErrorCode.PROVIDER_UNAVAILABLE),
    ("timed out", DeliveryErrorCode.NETWORK),
    ("timeout", DeliveryErrorCode.NETWORK),
    ("connection", DeliveryErrorCode.NETWORK),
    ("name or service not known", DeliveryErrorCode.NETWORK),
    ("bad request", DeliveryErrorCode.BAD_REQUEST),
)


def classify_delivery_error(status_code: int | None, detail: str | None) -> DeliveryErrorCode:
    """Map a provider failure onto a :class:`DeliveryErrorCode`.

    The status code decides whenever one is present. Otherwise the detail
    text is matched against :data:`DETAIL_PATTERNS`; anything unmatched is
    ``unknown``.
    """

    if status_code is not None:
        if status_code in STATUS_CODE_ERRORS:
            return STATUS_CODE_ERRORS[status_code]
        if status_code >= 500:
            return DeliveryErrorCode.PROVIDER_UNAVAILABLE
        return DeliveryErrorCode.UNKNOWN

    lowered = (detail or "").lower()
    for needle, code in DETAIL_PATTERNS:
        if needle in lowered:
            return code
    return DeliveryErrorCode.UNKNOWN


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _status_code_of(source: Any) -> int | None:
    status_code = getattr(source, "status_code", None)
    return status_code if isinstance(status_code, int) else None


def _failure_from_exception(exc: Exception) -> DeliveryFailure:
    status_code = _status_code_of(exc)
    details = _extract_sendgrid_error_details(getattr(exc, "body", None))
    detail = details or str(exc) or exc.__class__.__name__
    if status_code is None and isinstance(exc, OSError):
        code = DeliveryErrorCode.NETWORK
    else:
        code = classify_delivery_error(status_code, detail)

    if status_code:
        detail = f"SendGrid API request failed with status {status_code}: {detail}"
    return DeliveryFailure(detail, code=code, status_code=status_code)


def _failure_from_response(response: Any) -> DeliveryFailure:
    status_code = _status_code_of(response)
    details = _extract_sendgrid_error_details(getattr(response, "body", None))
    detail = f"SendGrid API responded with status {status_code}"
    if details:
        detail = f"{detail}: {details}"
    return DeliveryFailure(
        detail, code=classify_delivery_error(status_code, details), status_code=status_code
    )


class SendGridDeliveryChannel:
    """Send messages through the SendGrid v3 API."""

    def __init__(self, config: NotificationConfig, *, client: Any | None = None) -> None:
        if not config.api_key and client is None:
            raise ValueError("SendGrid delivery requires an API key")
        self._config = config
        self._client = client if client is not None else SendGridAPIClient(config.api_key)

    def build_mail(self, to: str, message: RenderedMessage) -> Mail:
        mail = Mail(
            from_email=From(self._config.sender_email, self._config.sender_name),
            to_emails=to,
            subject=message.subject,
            html_content=message.html,
            plain_text_content=message.text,
        )
        if message.reply_to:
            mail.reply_to = ReplyTo(message.reply_to)
        return mail

    async def send(self, to: str, message: RenderedMessage) -> None:
        mail = self.build_mail(to, message)
        try:
            response = await anyio.to_thread.run_sync(self._client.send, mail)
        except Exception as exc:
            raise _failure_from_exception(exc) from exc

        status_code = _status_code_of(response)
        if status_code is None or not 200 <= status_code < 300:
            raise _failure_from_response(response)

        logger.info("Email sent to %s: %s", mask_email(to), message.subject)


class LoggingDeliveryChannel:
    """Log would-be messages instead of sending them; never fails."""

    async def send(self, to: str, message: RenderedMessage) -> None:
        logger.info(
            "DEV MODE - email not sent. To: %s, Subject: %s, Reply-To: %s",
            mask_email(to),
            message.subject,
            mask_email(message.reply_to) if message.reply_to else "-",
        )


def build_delivery_channel(config: NotificationConfig) -> DeliveryChannel:
    """Return the channel matching ``config``."""

    if config.delivery_enabled:
        return SendGridDeliveryChannel(config)
    if config.dev_mode:
        logger.info("Notification dev mode enabled; e-mails will only be logged")
    else:
        logger.warning("SENDGRID_API_KEY not configured; e-mails will only be logged")
    return LoggingDeliveryChannel()


__all__ = [
    "DETAIL_PATTERNS",
    "LoggingDeliveryChannel",
    "STATUS_CODE_ERRORS",
    "SendGridDeliveryChannel",
    "build_delivery_channel",
    "classify_delivery_error",
]
