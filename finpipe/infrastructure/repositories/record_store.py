"""SQLAlchemy-backed record store read by the activity and maturity flows."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from finpipe.domain.entities import RecordKind
from finpipe.infrastructure.models import (
    InvestmentModel,
    PendingInvestmentModel,
    TransactionModel,
    UserModel,
    WithdrawalRequestModel,
)

_MODELS = {
    RecordKind.INVESTMENTS: (InvestmentModel, InvestmentModel.created_at),
    RecordKind.PENDING_INVESTMENTS: (
        PendingInvestmentModel,
        PendingInvestmentModel.created_at,
    ),
    RecordKind.TRANSACTIONS: (TransactionModel, TransactionModel.transaction_date),
    RecordKind.WITHDRAWAL_REQUESTS: (
        WithdrawalRequestModel,
        WithdrawalRequestModel.created_at,
    ),
}

MATURED_STATUS = "completed"


class SqlAlchemyRecordStore:
    """Read rows per owner, opening a fresh session for every call.

    Calls may run concurrently from worker threads; no session is shared
    between them.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def fetch_by_owner(
        self, kind: RecordKind, owner_id: str, *, limit: int | None = None
    ) -> list[dict[str, Any]]:
        model, recency_column = _MODELS[kind]
        session = self._session_factory()
        try:
            query = (
                session.query(model)
                .filter(model.user_id == owner_id)
                .order_by(recency_column.desc())
            )
            if limit is not None:
                query = query.limit(limit)
            return [self._to_mapping(row) for row in query.all()]
        finally:
            session.close()

    def list_matured_investments(self, *, since: datetime) -> list[dict[str, Any]]:
        session = self._session_factory()
        try:
            rows = (
                session.query(
                    InvestmentModel.id,
                    InvestmentModel.investment_name,
                    InvestmentModel.amount_invested,
                    InvestmentModel.expected_return_amount,
                    InvestmentModel.maturity_date,
                    UserModel.id.label("user_id"),
                    UserModel.email.label("user_email"),
                    UserModel.full_name.label("user_name"),
                )
                .join(UserModel, InvestmentModel.user_id == UserModel.id)
                .filter(InvestmentModel.status == MATURED_STATUS)
                .filter(InvestmentModel.maturity_date >= since)
                .order_by(InvestmentModel.maturity_date.asc())
                .all()
            )
        finally:
            session.close()

        return [
            {
                "investment_id": row.id,
                "user_id": row.user_id,
                "user_email": row.user_email,
                "user_name": row.user_name,
                "investment_name": row.investment_name,
                "amount_invested": row.amount_invested,
                "final_amount": row.expected_return_amount,
                "maturity_date": row.maturity_date,
            }
            for row in rows
        ]

    @staticmethod
    def _to_mapping(row: Any) -> dict[str, Any]:
        return {
            attribute.key: getattr(row, attribute.key)
            for attribute in inspect(row).mapper.column_attrs
        }


__all__ = ["MATURED_STATUS", "SqlAlchemyRecordStore"]
