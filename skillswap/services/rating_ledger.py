import logging
from datetime import datetime
from typing import Dict, List, Optional
from ..core.config import get_settings
from ..core.exceptions import (
    AlreadyRated,
    NotFoundError,
    NotParticipant,
    StoreError,
    SwapNotCompleted,
    ValidationError,
)
from ..core.supabase import execute_query, fetch_one
from ..schemas.notification import NotificationType
from ..schemas.swap import SwapStatus
from ..schemas.user import UserSession
from . import notification_relay, profile_service

logger = logging.getLogger(__name__)


async def submit(
    session: UserSession,
    swap_request_id: str,
    rating: int,
    feedback: Optional[str] = None,
) -> Dict:
    """
    Rate the other participant of a completed swap. Each participant rates a
    swap once; ratings are never edited afterwards.
    """
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be a whole number between 1 and 5")
    feedback = (feedback or "").strip() or None
    max_length = get_settings().rating_feedback_max_length
    if feedback and len(feedback) > max_length:
        raise ValidationError(f"Feedback must be no more than {max_length} characters long")

    swap = await fetch_one("swap_requests", {"id": str(swap_request_id)})
    if not swap:
        raise NotFoundError("Swap request not found")

    if swap["status"] != SwapStatus.COMPLETED.value:
        raise SwapNotCompleted("You can only rate completed swaps")

    from_user_id = session.user_id
    if from_user_id == swap["from_user_id"]:
        to_user_id = swap["to_user_id"]
    elif from_user_id == swap["to_user_id"]:
        to_user_id = swap["from_user_id"]
    else:
        raise NotParticipant("You don't have permission to rate this swap")

    existing = await fetch_one(
        "ratings", {"swap_request_id": swap["id"], "from_user_id": from_user_id}
    )
    if existing:
        raise AlreadyRated("You have already rated this swap")

    try:
        created = await execute_query(
            table="ratings",
            query_type="insert",
            data={
                "swap_request_id": swap["id"],
                "from_user_id": from_user_id,
                "to_user_id": to_user_id,
                "rating": rating,
                "feedback": feedback,
                "created_at": datetime.now().isoformat(),
            },
        )
    except StoreError as e:
        if e.is_unique_violation:
            raise AlreadyRated("You have already rated this swap") from e
        raise

    if not created:
        raise StoreError("Failed to create rating")

    new_rating = created[0]
    logger.info(f"User {from_user_id} rated {to_user_id} {rating}/5 for swap {swap['id']}")

    await profile_service.refresh_stats(to_user_id)
    await notification_relay.notify(
        to_user_id,
        NotificationType.RATING_RECEIVED,
        "New Rating",
        f"{session.name or 'Someone'} rated your skill exchange {rating}/5.",
        related_id=swap["id"],
    )
    return new_rating


async def list_for_user(user_id: str, skip: int = 0, limit: int = 10) -> List[Dict]:
    """Ratings a user has received, newest first."""
    ratings = await execute_query(
        table="ratings",
        query_type="select",
        filters={"to_user_id": str(user_id)},
        order_by={"created_at": "desc"},
        limit=skip + limit,
    )
    return ratings[skip:skip + limit]


async def list_for_swap(session: UserSession, swap_request_id: str) -> List[Dict]:
    swap = await fetch_one("swap_requests", {"id": str(swap_request_id)})
    if not swap:
        raise NotFoundError("Swap request not found")
    if session.user_id not in (swap["from_user_id"], swap["to_user_id"]) and not session.is_admin:
        raise NotParticipant("You don't have permission to view ratings for this swap")

    return await execute_query(
        table="ratings",
        query_type="select",
        filters={"swap_request_id": swap["id"]},
        order_by={"created_at": "desc"},
    )
