"""Tests for the SQLAlchemy record store on a throwaway SQLite file."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import anyio
import pytest
from sqlalchemy import inspect
from sqlalchemy.orm import sessionmaker

from finpipe.application.use_cases.activity import ActivityAggregator
from finpipe.domain.entities import ActivityType, RecordKind
from finpipe.infrastructure.database import Base, build_engine, initialize_database
from finpipe.infrastructure.models import (
    InvestmentModel,
    PendingInvestmentModel,
    TransactionModel,
    UserModel,
    WithdrawalRequestModel,
)
from finpipe.infrastructure.repositories import SqlAlchemyRecordStore


def _at(day: int, month: int = 3) -> datetime:
    return datetime(2025, month, day, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'records.db'}")
    initialize_database(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = factory()
    session.add_all(
        [
            UserModel(id="u1", email="ada@example.com", full_name="Ada", created_at=_at(1, 1)),
            UserModel(id="u2", email="bob@example.com", created_at=_at(1, 1)),
        ]
    )
    session.flush()
    session.add_all(
        [
            InvestmentModel(
                id="1",
                user_id="u1",
                investment_name="Gold Plan",
                amount_invested=Decimal("1000.00"),
                expected_return_amount=Decimal("1200.00"),
                maturity_date=_at(10),
                status="completed",
                created_at=_at(1, 2),
            ),
            InvestmentModel(
                id="2",
                user_id="u1",
                investment_name="Silver Plan",
                amount_invested=Decimal("500.00"),
                expected_return_amount=Decimal("550.00"),
                maturity_date=_at(20, 4),
                status="active",
                created_at=_at(5),
            ),
            InvestmentModel(
                id="3",
                user_id="u2",
                investment_name="Bronze Plan",
                amount_invested=Decimal("100.00"),
                expected_return_amount=Decimal("110.00"),
                maturity_date=_at(1),
                status="completed",
                created_at=_at(1, 1),
            ),
            PendingInvestmentModel(
                id="1",
                user_id="u1",
                plan_name="Gold Plan",
                amount_usd=Decimal("2500.00"),
                payment_method="btc",
                created_at=_at(12),
            ),
            TransactionModel(
                id="1",
                user_id="u1",
                investment_id="1",
                transaction_type="return",
                amount=Decimal("200.00"),
                description="Profit payout",
                transaction_date=_at(11),
            ),
            WithdrawalRequestModel(
                id="1",
                user_id="u1",
                amount=Decimal("150.00"),
                payment_method="usdt",
                wallet_address="TXyz",
                created_at=_at(13),
            ),
        ]
    )
    session.commit()
    session.close()

    yield factory

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def test_fetch_by_owner_orders_newest_first(session_factory) -> None:
    store = SqlAlchemyRecordStore(session_factory)

    rows = store.fetch_by_owner(RecordKind.INVESTMENTS, "u1")

    assert [row["id"] for row in rows] == ["2", "1"]
    assert rows[0]["investment_name"] == "Silver Plan"
    assert rows[0]["amount_invested"] == Decimal("500.00")


def test_fetch_by_owner_respects_limit_and_owner(session_factory) -> None:
    store = SqlAlchemyRecordStore(session_factory)

    assert [row["id"] for row in store.fetch_by_owner(RecordKind.INVESTMENTS, "u1", limit=1)] == ["2"]
    assert [row["id"] for row in store.fetch_by_owner(RecordKind.INVESTMENTS, "u2")] == ["3"]
    assert store.fetch_by_owner(RecordKind.WITHDRAWAL_REQUESTS, "nobody") == []


def test_every_kind_is_readable(session_factory) -> None:
    store = SqlAlchemyRecordStore(session_factory)

    counts = {kind: len(store.fetch_by_owner(kind, "u1")) for kind in RecordKind}

    assert counts == {
        RecordKind.INVESTMENTS: 2,
        RecordKind.PENDING_INVESTMENTS: 1,
        RecordKind.TRANSACTIONS: 1,
        RecordKind.WITHDRAWAL_REQUESTS: 1,
    }


def test_list_matured_investments_joins_owner(session_factory) -> None:
    store = SqlAlchemyRecordStore(session_factory)

    rows = store.list_matured_investments(since=_at(5))

    assert len(rows) == 1
    row = rows[0]
    assert row["investment_id"] == "1"
    assert row["user_email"] == "ada@example.com"
    assert row["user_name"] == "Ada"
    assert row["final_amount"] == Decimal("1200.00")


def test_aggregator_over_sqlalchemy_store(session_factory) -> None:
    store = SqlAlchemyRecordStore(session_factory)
    aggregator = ActivityAggregator(store, clock=lambda: _at(15))

    feed = anyio.run(aggregator.aggregate, "u1")

    assert feed.error is None
    assert [item.id for item in feed.items] == [
        "withdrawal-1",
        "pending-1",
        "transaction-1",
        "return-1",
        "investment-2",
        "investment-1",
    ]
    assert feed.items[3].type is ActivityType.RETURN
    assert feed.items[3].amount == Decimal("1200.00")
    assert feed.stats.active_investments == 1
    assert feed.stats.pending_requests == 2


def test_offset_timestamps_are_stored_as_utc(tmp_path) -> None:
    engine = build_engine(f"sqlite:///{tmp_path / 'offsets.db'}")
    initialize_database(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    eastern = timezone(timedelta(hours=-5))

    session = factory()
    session.add(UserModel(id="u1", email="ada@example.com", created_at=_at(1, 1)))
    session.flush()
    session.add_all(
        [
            InvestmentModel(
                id="1",
                user_id="u1",
                investment_name="Gold Plan",
                amount_invested=Decimal("1000.00"),
                expected_return_amount=Decimal("1200.00"),
                maturity_date=datetime(2025, 3, 1, 0, 0, tzinfo=eastern),
                status="completed",
                created_at=datetime(2025, 3, 1, 0, 0, tzinfo=eastern),
            ),
            TransactionModel(
                id="1",
                user_id="u1",
                transaction_type="deposit",
                amount=Decimal("50.00"),
                transaction_date=datetime(2025, 3, 1, 3, 0, tzinfo=timezone.utc),
            ),
        ]
    )
    session.commit()
    session.close()

    store = SqlAlchemyRecordStore(factory)
    try:
        rows = store.fetch_by_owner(RecordKind.INVESTMENTS, "u1")
        assert rows[0]["created_at"] == datetime(2025, 3, 1, 5, 0, tzinfo=timezone.utc)

        feed = anyio.run(ActivityAggregator(store, clock=lambda: _at(15)).aggregate, "u1")
        assert [item.id for item in feed.items] == ["investment-1", "return-1", "transaction-1"]

        since = datetime(2025, 3, 1, 4, 0, tzinfo=timezone.utc)
        assert [row["investment_id"] for row in store.list_matured_investments(since=since)] == ["1"]
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def test_investment_reads_do_not_join_users() -> None:
    assert not inspect(InvestmentModel).relationships
