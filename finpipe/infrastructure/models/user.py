"""SQLAlchemy model for platform users."""

from sqlalchemy import Column, String

from finpipe.infrastructure.database import Base, UTCDateTime
from finpipe.utils import now_in_app_timezone


class UserModel(Base):
    """Investor account owning investments, transactions and withdrawals."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(150), nullable=True)
    created_at = Column(
        UTCDateTime, nullable=False, default=now_in_app_timezone
    )


__all__ = ["UserModel"]
