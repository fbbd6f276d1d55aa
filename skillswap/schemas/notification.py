from pydantic import BaseModel, Field, UUID4
from typing import Optional
from datetime import datetime
from enum import Enum

class NotificationType(str, Enum):
    SWAP_REQUEST = "swap_request"
    SWAP_ACCEPTED = "swap_accepted"
    SWAP_REJECTED = "swap_rejected"
    SWAP_CANCELLED = "swap_cancelled"
    SWAP_COMPLETED = "swap_completed"
    SWAP_DELETED = "swap_deleted"
    RATING_RECEIVED = "rating_received"
    SYSTEM = "system"

class NotificationBase(BaseModel):
    type: NotificationType
    title: str = Field(..., max_length=100)
    message: str = Field(..., max_length=500)
    related_id: Optional[UUID4] = None  # swap request or rating the event is about
    is_read: bool = False

class NotificationUpdate(BaseModel):
    is_read: bool = True

class NotificationResponse(NotificationBase):
    id: UUID4
    user_id: UUID4
    created_at: datetime
