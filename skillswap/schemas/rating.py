from pydantic import BaseModel, Field, UUID4
from typing import Optional
from datetime import datetime

class RatingBase(BaseModel):
    swap_request_id: UUID4
    rating: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = Field(None, max_length=500)

class RatingCreate(RatingBase):
    pass

class RatingResponse(RatingBase):
    id: UUID4
    from_user_id: UUID4
    to_user_id: UUID4
    created_at: datetime
