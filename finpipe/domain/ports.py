"""Collaborator interfaces the pipeline depends on."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Protocol

from finpipe.domain.entities import RecordKind, RenderedMessage


class RecordStore(Protocol):
    """Source of truth for investment, transaction and withdrawal rows."""

    def fetch_by_owner(
        self, kind: RecordKind, owner_id: str, *, limit: int | None = None
    ) -> list[Mapping[str, Any]]:
        """Return ``owner_id``'s rows of ``kind``, newest first."""

    def list_matured_investments(self, *, since: datetime) -> list[Mapping[str, Any]]:
        """Return completed investments that matured at or after ``since``."""


class DeliveryChannel(Protocol):
    """Capability that hands one rendered message to one address."""

    async def send(self, to: str, message: RenderedMessage) -> None:
        """Deliver ``message`` or raise :class:`DeliveryFailure`."""


__all__ = ["DeliveryChannel", "RecordStore"]
