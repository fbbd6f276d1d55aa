from pydantic import BaseModel, UUID4
from typing import Optional, List
from datetime import datetime
from enum import Enum

class SwapStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class SwapAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    CANCEL = "cancel"
    COMPLETE = "complete"

class SwapRole(str, Enum):
    SENT = "sent"
    RECEIVED = "received"

# Length rules for `message` are configurable, so they are checked in the
# lifecycle service rather than on the model.
class SwapCreate(BaseModel):
    to_user_id: UUID4
    skill_offered: str
    skill_wanted: str
    message: str

class SkillPair(BaseModel):
    skill_offered: str = ""
    skill_wanted: str = ""

class ExchangeCreate(BaseModel):
    to_user_id: UUID4
    exchanges: List[SkillPair]
    message: str

class SwapResponse(BaseModel):
    id: UUID4
    from_user_id: UUID4
    to_user_id: UUID4
    skill_offered_id: UUID4
    skill_wanted_id: UUID4
    skill_offered_name: Optional[str] = None
    skill_wanted_name: Optional[str] = None
    message: str
    status: SwapStatus = SwapStatus.PENDING
    created_at: datetime
    updated_at: datetime

class ExchangeFailure(BaseModel):
    index: int
    skill_offered: str
    skill_wanted: str
    detail: str

class ExchangeResult(BaseModel):
    created: List[SwapResponse] = []
    failed: Optional[ExchangeFailure] = None
