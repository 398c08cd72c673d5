"""Scheduled processing of investments that reached maturity."""

from __future__ import annotations

import functools
import logging
from datetime import date, datetime

import anyio

from finpipe.application.use_cases.notifications import LifecycleCoordinator, TransitionResult
from finpipe.domain.ports import RecordStore

logger = logging.getLogger(__name__)


def build_maturity_summary(count: int, processed_on: date) -> str:
    return (
        f"Automated processing completed. {count} investments matured on "
        f"{processed_on.isoformat()}."
    )


async def process_matured_investments(
    store: RecordStore,
    coordinator: LifecycleCoordinator,
    *,
    since: datetime,
    processed_on: date,
) -> TransitionResult:
    """Notify every owner of an investment that matured since ``since``.

    Store failures propagate; delivery failures only show up in the
    returned counts.
    """

    rows = await anyio.to_thread.run_sync(
        functools.partial(store.list_matured_investments, since=since)
    )
    logger.info("Found %s matured investments since %s", len(rows), since.isoformat())
    payload = {
        "maturedInvestments": [dict(row) for row in rows],
        "summary": build_maturity_summary(len(rows), processed_on),
    }
    return await coordinator.notify_maturity_batch(payload)


__all__ = ["build_maturity_summary", "process_matured_investments"]
