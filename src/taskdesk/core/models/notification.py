"""Notification -- 面向用户的临时通知（toast）"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .enums import NotificationLevel


class Notification(BaseModel):
    """一条用户可见通知"""

    level: NotificationLevel = Field(description="通知级别")
    message: str = Field(description="展示文案")
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC), description="产生时间")
