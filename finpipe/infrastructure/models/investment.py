"""SQLAlchemy model for approved investments."""

from sqlalchemy import Column, ForeignKey, Numeric, String

from finpipe.infrastructure.database import Base, UTCDateTime
from finpipe.utils import now_in_app_timezone


class InvestmentModel(Base):
    """An active or completed investment position."""

    __tablename__ = "investments"

    id = Column(String(36), primary_key=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    investment_name = Column(String(120), nullable=False)
    amount_invested = Column(Numeric(18, 2), nullable=False)
    expected_return_amount = Column(Numeric(18, 2), nullable=False)
    maturity_date = Column(UTCDateTime, nullable=True)
    status = Column(String(30), nullable=False, default="active")
    created_at = Column(
        UTCDateTime, nullable=False, default=now_in_app_timezone
    )


__all__ = ["InvestmentModel"]
