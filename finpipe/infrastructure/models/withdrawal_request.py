"""SQLAlchemy model for withdrawal requests."""

from sqlalchemy import Column, ForeignKey, Numeric, String

from finpipe.infrastructure.database import Base, UTCDateTime
from finpipe.utils import now_in_app_timezone


class WithdrawalRequestModel(Base):
    """Request to pay out funds to an external wallet."""

    __tablename__ = "withdrawal_requests"

    id = Column(String(36), primary_key=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(18, 2), nullable=False)
    payment_method = Column(String(30), nullable=False)
    wallet_address = Column(String(255), nullable=False)
    status = Column(String(30), nullable=False, default="pending")
    created_at = Column(
        UTCDateTime, nullable=False, default=now_in_app_timezone
    )


__all__ = ["WithdrawalRequestModel"]
