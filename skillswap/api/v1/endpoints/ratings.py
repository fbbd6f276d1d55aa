from fastapi import APIRouter, status, Depends, Path, Query
from typing import List
from pydantic import UUID4
from ....core.security import get_current_session
from ....schemas.rating import RatingCreate, RatingResponse
from ....schemas.user import UserSession
from ....services import rating_ledger

router = APIRouter(tags=["ratings"])

@router.post("/", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
async def create_rating(
    rating: RatingCreate,
    session: UserSession = Depends(get_current_session)
):
    """
    Rate the other participant after a completed swap.
    """
    return await rating_ledger.submit(
        session,
        str(rating.swap_request_id),
        rating.rating,
        rating.feedback,
    )

@router.get("/user/{user_id}", response_model=List[RatingResponse])
async def get_user_ratings(
    user_id: UUID4 = Path(...),
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100)
):
    """
    Get the ratings a user has received.
    """
    return await rating_ledger.list_for_user(str(user_id), skip=skip, limit=limit)

@router.get("/swap/{swap_id}", response_model=List[RatingResponse])
async def get_swap_ratings(
    swap_id: UUID4 = Path(...),
    session: UserSession = Depends(get_current_session)
):
    """
    Get all ratings for a specific swap.
    """
    return await rating_ledger.list_for_swap(session, str(swap_id))
