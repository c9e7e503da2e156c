from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from cleanops.core.schemas import utcnow


class NotificationType(str, Enum):
    STOCK_MOVEMENT = "STOCK_MOVEMENT"
    STOCK_ALERT = "STOCK_ALERT"
    STOCK_OUT = "STOCK_OUT"
    SYSTEM = "SYSTEM"

class NotificationPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

# --- Modèle Notification SQLModel ---

class NotificationBase(SQLModel):
    # user_id NULL: notification diffusée à tout le personnel
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    type: NotificationType = Field(index=True)
    title: str = Field(max_length=200)
    message: str
    priority: NotificationPriority = Field(default=NotificationPriority.LOW)

class Notification(NotificationBase, table=True):
    __tablename__ = "notifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    data: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    is_read: bool = Field(default=False, index=True)
    read_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

class NotificationRead(NotificationBase):
    id: int
    data: Optional[Dict[str, Any]] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

class UnreadNotifications(SQLModel):
    count: int
    notifications: List[NotificationRead] = []

# --- Fin Modèle Notification SQLModel ---
