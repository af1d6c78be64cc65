"""
API schemas for the notification test endpoints
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class NotificationRequest(BaseModel):
    type: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=2000)
    data: Dict[str, Any] = {}


class EmailNotificationRequest(NotificationRequest):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")


class BatchEmailNotificationRequest(NotificationRequest):
    emails: List[str] = Field(..., min_length=1)


class NotificationSentResponse(BaseModel):
    success: bool = True
    message: str
