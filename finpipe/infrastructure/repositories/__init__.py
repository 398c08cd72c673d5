"""Repository implementations for infrastructure layer."""

from .record_store import MATURED_STATUS, SqlAlchemyRecordStore

__all__ = ["MATURED_STATUS", "SqlAlchemyRecordStore"]
