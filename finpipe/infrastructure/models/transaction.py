"""SQLAlchemy model for ledger transactions."""

from sqlalchemy import Column, ForeignKey, Numeric, String, Text

from finpipe.infrastructure.database import Base, UTCDateTime
from finpipe.utils import now_in_app_timezone


class TransactionModel(Base):
    """Money movement recorded on a user's ledger."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    investment_id = Column(
        String(36),
        ForeignKey("investments.id", ondelete="SET NULL"),
        nullable=True,
    )
    transaction_type = Column(String(30), nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String(30), nullable=False, default="completed")
    transaction_date = Column(
        UTCDateTime, nullable=False, default=now_in_app_timezone
    )


__all__ = ["TransactionModel"]
