"""
Swap request lifecycle.

A swap request moves through these states:

    pending --accept--> accepted --complete--> completed
    pending --reject--> rejected
    pending --cancel--> cancelled

`rejected`, `completed` and `cancelled` are terminal. Every other
(status, action) pair is an invalid transition. The recipient accepts or
rejects, the requester cancels, and either participant completes. An
administrator may act for either side, but the state rules still apply.

Each operation is a single round trip to the store and there is no
transaction around multi-row work: `create_exchange` writes one row per
skill pair and leaves earlier rows in place if a later one fails.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional
from ..core.config import get_settings
from ..core.exceptions import (
    InvalidTransition,
    NotFoundError,
    NotParticipant,
    SkillSwapError,
    StoreError,
    ValidationError,
)
from ..core.supabase import execute_query, fetch_one
from ..schemas.notification import NotificationType
from ..schemas.swap import SkillPair, SwapAction, SwapRole, SwapStatus
from ..schemas.user import UserSession
from . import notification_relay, profile_service, skill_directory, user_skills

logger = logging.getLogger(__name__)

REQUESTER = "requester"
RECIPIENT = "recipient"
EITHER = "either"

# (current status, action) -> (new status, who may perform it)
TRANSITIONS = {
    (SwapStatus.PENDING, SwapAction.ACCEPT): (SwapStatus.ACCEPTED, RECIPIENT),
    (SwapStatus.PENDING, SwapAction.REJECT): (SwapStatus.REJECTED, RECIPIENT),
    (SwapStatus.PENDING, SwapAction.CANCEL): (SwapStatus.CANCELLED, REQUESTER),
    (SwapStatus.ACCEPTED, SwapAction.COMPLETE): (SwapStatus.COMPLETED, EITHER),
}

_NOTIFICATIONS = {
    SwapAction.ACCEPT: (NotificationType.SWAP_ACCEPTED, "Request Accepted", "{actor} accepted your swap request."),
    SwapAction.REJECT: (NotificationType.SWAP_REJECTED, "Request Declined", "{actor} declined your swap request."),
    SwapAction.CANCEL: (NotificationType.SWAP_CANCELLED, "Request Cancelled", "{actor} cancelled their swap request."),
    SwapAction.COMPLETE: (NotificationType.SWAP_COMPLETED, "Swap Completed", "{actor} marked your skill exchange as completed."),
}


def role_of(swap: Dict, user_id: str) -> Optional[str]:
    if swap["from_user_id"] == str(user_id):
        return REQUESTER
    if swap["to_user_id"] == str(user_id):
        return RECIPIENT
    return None


def counterpart_of(swap: Dict, user_id: str) -> str:
    return swap["to_user_id"] if swap["from_user_id"] == str(user_id) else swap["from_user_id"]


def validate_message(message: str) -> str:
    settings = get_settings()
    message = (message or "").strip()
    if len(message) < settings.swap_message_min_length:
        raise ValidationError(
            f"Message must be at least {settings.swap_message_min_length} characters long"
        )
    if len(message) > settings.swap_message_max_length:
        raise ValidationError(
            f"Message must be no more than {settings.swap_message_max_length} characters long"
        )
    return message


async def _decorate(swaps: List[Dict]) -> List[Dict]:
    """Attach skill names to swap rows."""
    ids = set()
    for swap in swaps:
        ids.update((swap["skill_offered_id"], swap["skill_wanted_id"]))
    names = await skill_directory.names_for(ids)
    return [
        {
            **swap,
            "skill_offered_name": names.get(swap["skill_offered_id"]),
            "skill_wanted_name": names.get(swap["skill_wanted_id"]),
        }
        for swap in swaps
    ]


async def _load_swap(swap_id: str) -> Dict:
    swap = await fetch_one("swap_requests", {"id": str(swap_id)})
    if not swap:
        raise NotFoundError("Swap request not found")
    return swap


async def _load_recipient(to_user_id: str) -> Dict:
    recipient = await fetch_one("profiles", {"id": to_user_id})
    if not recipient:
        raise NotFoundError("User not found")
    if recipient.get("is_banned"):
        raise ValidationError("This user is not accepting swap requests")
    return recipient


async def create_swap_request(
    session: UserSession,
    to_user_id: str,
    skill_offered: str,
    skill_wanted: str,
    message: str,
    notify: bool = True,
) -> Dict:
    """
    Send a swap request offering one of the requester's skills for one of
    the recipient's. All preconditions are checked before anything is written.
    """
    from_user_id = session.user_id
    to_user_id = str(to_user_id)

    if from_user_id == to_user_id:
        raise ValidationError("You cannot send a swap request to yourself")
    message = validate_message(message)
    await _load_recipient(to_user_id)

    skill_offered_id = await skill_directory.id_for(skill_offered)
    skill_wanted_id = await skill_directory.id_for(skill_wanted)

    if skill_offered_id not in await user_skills.offered_skill_ids(from_user_id):
        raise ValidationError(f"You do not offer '{skill_offered}'")
    if skill_wanted_id not in await user_skills.offered_skill_ids(to_user_id):
        raise ValidationError(f"This user does not offer '{skill_wanted}'")

    now = datetime.now().isoformat()
    created = await execute_query(
        table="swap_requests",
        query_type="insert",
        data={
            "from_user_id": from_user_id,
            "to_user_id": to_user_id,
            "skill_offered_id": skill_offered_id,
            "skill_wanted_id": skill_wanted_id,
            "message": message,
            "status": SwapStatus.PENDING.value,
            "created_at": now,
            "updated_at": now,
        },
    )
    if not created:
        raise StoreError("Failed to create swap request")

    swap = created[0]
    logger.info(
        f"Swap request {swap['id']} sent by {from_user_id} to {to_user_id}: "
        f"{skill_offered} for {skill_wanted}"
    )

    if notify:
        await notification_relay.notify(
            to_user_id,
            NotificationType.SWAP_REQUEST,
            "New Skill Exchange Request",
            f"{session.name or 'Someone'} wants to exchange: {skill_offered} ↔ {skill_wanted}",
            related_id=swap["id"],
        )

    return (await _decorate([swap]))[0]


async def create_exchange(
    session: UserSession,
    to_user_id: str,
    pairs: List[SkillPair],
    message: str,
) -> Dict:
    """
    Propose several skill pairs to the same user at once.

    Each pair becomes its own swap request, created one after another. The
    first failure stops the loop; requests created before it stay in place.
    Returns {"created": [...], "failed": None | {index, skill_offered,
    skill_wanted, detail}}.
    """
    if not pairs:
        raise ValidationError("At least one skill exchange is required")
    if any(not pair.skill_offered.strip() or not pair.skill_wanted.strip() for pair in pairs):
        raise ValidationError("Please complete all skill exchanges or remove incomplete ones")

    offered = [pair.skill_offered.strip() for pair in pairs]
    wanted = [pair.skill_wanted.strip() for pair in pairs]
    if len(set(offered)) != len(offered):
        raise ValidationError("You cannot offer the same skill multiple times")
    if len(set(wanted)) != len(wanted):
        raise ValidationError("You cannot request the same skill multiple times")
    if session.user_id == str(to_user_id):
        raise ValidationError("You cannot send a swap request to yourself")
    message = validate_message(message)

    created, failed = [], None
    for index, (skill_offered, skill_wanted) in enumerate(zip(offered, wanted)):
        try:
            swap = await create_swap_request(
                session, to_user_id, skill_offered, skill_wanted, message, notify=False
            )
        except SkillSwapError as e:
            logger.warning(
                f"Exchange from {session.user_id} to {to_user_id} stopped at pair {index} "
                f"after {len(created)} created: {e.detail}"
            )
            failed = {
                "index": index,
                "skill_offered": skill_offered,
                "skill_wanted": skill_wanted,
                "detail": e.detail,
            }
            break
        created.append(swap)

    if created:
        skills_list = ", ".join(
            f"{swap['skill_offered_name']} ↔ {swap['skill_wanted_name']}" for swap in created
        )
        await notification_relay.notify(
            str(to_user_id),
            NotificationType.SWAP_REQUEST,
            "New Skill Exchange Request",
            f"{session.name or 'Someone'} wants to exchange: {skills_list}",
            related_id=created[0]["id"],
        )

    return {"created": created, "failed": failed}


async def transition(session: UserSession, swap_id: str, action: SwapAction) -> Dict:
    """
    Apply a lifecycle action to a swap request.

    The status is checked before the actor, so repeating an action on a swap
    that has already moved on is an InvalidTransition, while the wrong
    participant acting on a valid state is NotParticipant.
    """
    action = SwapAction(action)
    swap = await _load_swap(swap_id)
    role = role_of(swap, session.user_id)

    if role is None and not session.is_admin:
        raise NotParticipant("You are not a participant in this swap request")

    current = SwapStatus(swap["status"])
    if (current, action) not in TRANSITIONS:
        raise InvalidTransition(f"Cannot {action.value} a swap request that is {current.value}")

    new_status, allowed = TRANSITIONS[(current, action)]
    # Admins act for the participants only when they are not one of them.
    acting_for_participants = role is None and session.is_admin
    if allowed != EITHER and role != allowed and not acting_for_participants:
        raise NotParticipant(f"Only the {allowed} can {action.value} this swap request")

    # Conditional on the status read above so a concurrent change cannot be overwritten.
    updated = await execute_query(
        table="swap_requests",
        query_type="update",
        filters={"id": swap["id"], "status": current.value},
        data={"status": new_status.value, "updated_at": datetime.now().isoformat()},
    )
    if not updated:
        raise InvalidTransition("The swap request changed while it was being updated; reload and try again")

    swap = updated[0]
    logger.info(
        f"Swap request {swap['id']} {current.value} -> {new_status.value} by {session.user_id}"
        f"{' (admin)' if role is None else ''}"
    )

    event_type, title, body = _NOTIFICATIONS[action]
    recipients = [counterpart_of(swap, session.user_id)] if role else [swap["from_user_id"], swap["to_user_id"]]
    actor = (session.name or "Someone") if role else "An administrator"
    for user_id in recipients:
        await notification_relay.notify(
            user_id, event_type, title, body.format(actor=actor), related_id=swap["id"]
        )

    if new_status == SwapStatus.COMPLETED:
        await profile_service.refresh_stats(swap["from_user_id"])
        await profile_service.refresh_stats(swap["to_user_id"])

    return (await _decorate([swap]))[0]


async def accept(session: UserSession, swap_id: str) -> Dict:
    return await transition(session, swap_id, SwapAction.ACCEPT)


async def reject(session: UserSession, swap_id: str) -> Dict:
    return await transition(session, swap_id, SwapAction.REJECT)


async def cancel(session: UserSession, swap_id: str) -> Dict:
    return await transition(session, swap_id, SwapAction.CANCEL)


async def complete(session: UserSession, swap_id: str) -> Dict:
    return await transition(session, swap_id, SwapAction.COMPLETE)


async def delete_swap_request(session: UserSession, swap_id: str) -> None:
    """Hard-delete a request. Only the requester may, and only while it is pending."""
    swap = await _load_swap(swap_id)
    role = role_of(swap, session.user_id)

    if role is None and not session.is_admin:
        raise NotParticipant("You are not a participant in this swap request")
    if SwapStatus(swap["status"]) != SwapStatus.PENDING:
        raise InvalidTransition(f"Cannot delete a swap request that is {swap['status']}")
    if role != REQUESTER and not (role is None and session.is_admin):
        raise NotParticipant("Only the requester can delete this swap request")

    deleted = await execute_query(
        table="swap_requests",
        query_type="delete",
        filters={"id": swap["id"], "status": SwapStatus.PENDING.value},
    )
    if not deleted:
        raise InvalidTransition("The swap request changed while it was being deleted; reload and try again")

    logger.info(f"Swap request {swap['id']} deleted by {session.user_id}")
    await notification_relay.notify(
        swap["to_user_id"],
        NotificationType.SWAP_DELETED,
        "Request Withdrawn",
        f"{session.name or 'Someone'} withdrew their swap request.",
        related_id=swap["id"],
    )


async def get_swap(session: UserSession, swap_id: str) -> Dict:
    swap = await _load_swap(swap_id)
    if role_of(swap, session.user_id) is None and not session.is_admin:
        raise NotParticipant("You don't have permission to view this swap request")
    return (await _decorate([swap]))[0]


async def list_for_user(
    user_id: str,
    status: Optional[SwapStatus] = None,
    role: Optional[SwapRole] = None,
) -> List[Dict]:
    """A user's swap requests, sent and received, newest first."""
    user_id = str(user_id)
    filters = {}
    or_filter = None

    if role == SwapRole.SENT:
        filters["from_user_id"] = user_id
    elif role == SwapRole.RECEIVED:
        filters["to_user_id"] = user_id
    else:
        or_filter = f"from_user_id.eq.{user_id},to_user_id.eq.{user_id}"

    if status:
        filters["status"] = SwapStatus(status).value

    swaps = await execute_query(
        table="swap_requests",
        query_type="select",
        filters=filters or None,
        or_filter=or_filter,
        order_by={"created_at": "desc"},
    )
    return await _decorate(swaps)
