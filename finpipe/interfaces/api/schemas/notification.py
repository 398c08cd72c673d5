"""Pydantic schemas for notification trigger endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class NotificationResponse(BaseModel):
    success: bool | None = None
    message: str | None = None
    error: str | None = None


class MaturityNotificationResponse(NotificationResponse):
    model_config = ConfigDict(populate_by_name=True)

    emails_sent: int = Field(0, alias="emailsSent")
    emails_failed: int = Field(0, alias="emailsFailed")


__all__ = ["MaturityNotificationResponse", "NotificationResponse"]
