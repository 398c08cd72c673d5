"""Send maturity notices for investments that matured recently."""

from __future__ import annotations

import argparse
import functools
from datetime import timedelta

import anyio
from sqlalchemy.exc import SQLAlchemyError

from finpipe.application.use_cases.maturity import process_matured_investments
from finpipe.application.use_cases.notifications import (
    LifecycleCoordinator,
    NotificationDispatcher,
)
from finpipe.config import NotificationConfig, get_settings
from finpipe.infrastructure.database import SessionLocal, initialize_database
from finpipe.infrastructure.email import build_delivery_channel
from finpipe.infrastructure.logging_config import configure_logging
from finpipe.infrastructure.repositories import SqlAlchemyRecordStore
from finpipe.utils import now_in_app_timezone


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the maturity run."""

    parser = argparse.ArgumentParser(
        description="Send maturity e-mails for investments completed recently.",
    )
    parser.add_argument(
        "--days-back",
        type=int,
        default=1,
        help="How many days back to look for matured investments (default: 1)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if args.days_back < 0:
        raise SystemExit("--days-back must not be negative.")

    settings = get_settings()
    configure_logging(settings)
    initialize_database()

    config = NotificationConfig.from_settings(settings)
    coordinator = LifecycleCoordinator(
        NotificationDispatcher(build_delivery_channel(config), config)
    )
    store = SqlAlchemyRecordStore(SessionLocal)

    now = now_in_app_timezone()
    since = now - timedelta(days=args.days_back)
    try:
        result = anyio.run(
            functools.partial(
                process_matured_investments,
                store,
                coordinator,
                since=since,
                processed_on=now.date(),
            )
        )
    except SQLAlchemyError as exc:
        raise SystemExit(f"Could not load matured investments: {exc}") from exc

    print(
        "Maturity processing finished:\n"
        f"  {result.message}\n"
        f"  Emails sent: {result.emails_sent}\n"
        f"  Emails failed: {result.emails_failed}"
    )


if __name__ == "__main__":
    main()
