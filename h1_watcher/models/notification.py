"""Notification result models.

Provides Pydantic models for:
- NotificationResult: outcome of a single message send on one channel
"""

from typing import Optional

from pydantic import BaseModel, Field


class NotificationResult(BaseModel):
    """Result of a notification attempt.

    Attributes:
        success: Whether the message was accepted by the channel.
        provider: Channel name ("telegram", "discord", "recon").
        error: Error message if failed.
        response_status: HTTP response status code.
        part: 1-indexed chunk number within the channel's batch.
    """

    success: bool = Field(..., description="Whether notification succeeded")
    provider: str = Field(..., description="Notification provider name")
    error: Optional[str] = Field(default=None, description="Error message if failed")
    response_status: Optional[int] = Field(
        default=None, description="HTTP response status"
    )
    part: int = Field(default=1, ge=1)
