"""SQLAlchemy model for investment requests awaiting review."""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String

from finpipe.infrastructure.database import Base, UTCDateTime
from finpipe.utils import now_in_app_timezone


class PendingInvestmentModel(Base):
    """Investment request submitted by a user and not yet activated."""

    __tablename__ = "pending_investments"

    id = Column(String(36), primary_key=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_name = Column(String(120), nullable=False)
    amount_usd = Column(Numeric(18, 2), nullable=False)
    expected_return = Column(Numeric(18, 2), nullable=False, default=0)
    duration_days = Column(Integer, nullable=False, default=0)
    interest_rate = Column(Numeric(8, 4), nullable=False, default=0)
    payment_method = Column(String(30), nullable=False)
    transaction_hash = Column(String(255), nullable=True)
    status = Column(String(30), nullable=False, default="pending")
    maturity_date = Column(UTCDateTime, nullable=True)
    created_at = Column(
        UTCDateTime, nullable=False, default=now_in_app_timezone
    )


__all__ = ["PendingInvestmentModel"]
