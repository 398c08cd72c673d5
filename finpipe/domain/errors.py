"""Exception types raised inside the pipeline's units of work."""

from __future__ import annotations

from finpipe.domain.entities.activity import RecordKind
from finpipe.domain.entities.notification import DeliveryErrorCode


class ValidationError(ValueError):
    """Caller-correctable input problem detected before any delivery."""


class SourceUnavailable(RuntimeError):
    """A single activity source could not be read or transformed."""

    def __init__(self, kind: RecordKind, detail: str) -> None:
        super().__init__(f"{kind.value}: {detail}")
        self.kind = kind
        self.detail = detail


class DeliveryFailure(RuntimeError):
    """A delivery channel could not hand a message to its recipient."""

    def __init__(
        self,
        detail: str,
        *,
        code: DeliveryErrorCode = DeliveryErrorCode.UNKNOWN,
        status_code: int | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.code = code
        self.status_code = status_code


__all__ = ["DeliveryFailure", "SourceUnavailable", "ValidationError"]
