"""Logging setup shared by the API and the maturity job."""

from __future__ import annotations

import logging
import logging.config
import re

from finpipe.config import Settings

EMAIL_PATTERN = re.compile(r"([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")
_VISIBLE_PREFIX = 2


def mask_email(value: str) -> str:
    """Hide the local part of every e-mail address found in ``value``.

    ``alice@example.com`` becomes ``al***@example.com``.
    """

    def _mask(match: re.Match[str]) -> str:
        local, domain = match.group(1), match.group(2)
        return f"{local[:_VISIBLE_PREFIX]}***@{domain}"

    return EMAIL_PATTERN.sub(_mask, value)


class EmailMaskingFilter(logging.Filter):
    """Mask e-mail addresses in the message and its arguments."""

    def _sanitize(self, value: object) -> object:
        if not isinstance(value, str):
            return value
        return mask_email(value)

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._sanitize(record.msg)

        if isinstance(record.args, tuple):
            record.args = tuple(self._sanitize(item) for item in record.args)
        elif isinstance(record.args, dict):
            record.args = {key: self._sanitize(value) for key, value in record.args.items()}

        return True


def configure_logging(settings: Settings) -> None:
    """Install the console handler at ``settings.log_level``."""

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "mask_email": {"()": EmailMaskingFilter},
            },
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["mask_email"],
                }
            },
            "loggers": {
                "": {
                    "handlers": ["console"],
                    "level": settings.log_level.upper(),
                },
                "uvicorn.access": {
                    "handlers": ["console"],
                    "level": "WARNING",
                    "propagate": False,
                },
            },
        }
    )


__all__ = ["EmailMaskingFilter", "configure_logging", "mask_email"]
