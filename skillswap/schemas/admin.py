from pydantic import BaseModel, Field, UUID4
from typing import Optional
from datetime import datetime
from enum import Enum

class AdminMessageType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    MAINTENANCE = "maintenance"
    FEATURE = "feature"

class AdminActionType(str, Enum):
    BAN_USER = "ban_user"
    UNBAN_USER = "unban_user"
    SEND_MESSAGE = "send_message"
    DEACTIVATE_MESSAGE = "deactivate_message"

class BanRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)

class AdminMessageCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=2000)
    type: AdminMessageType = AdminMessageType.INFO

class AdminMessageResponse(AdminMessageCreate):
    id: UUID4
    is_active: bool
    created_by: UUID4
    created_at: datetime
