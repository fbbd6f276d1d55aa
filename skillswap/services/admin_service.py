import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from ..core.exceptions import NotFoundError, StoreError, ValidationError
from ..core.supabase import execute_query
from ..schemas.admin import AdminActionType, AdminMessageCreate
from ..schemas.user import UserSession

logger = logging.getLogger(__name__)


async def log_action(
    admin_id: str,
    action: AdminActionType,
    target_id: str,
    reason: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Record an admin action. The audit row is best-effort: failures are only logged."""
    try:
        await execute_query(
            table="admin_actions",
            query_type="insert",
            data={
                "admin_id": admin_id,
                "action": action.value,
                "target_id": target_id,
                "reason": reason,
                "details": details,
                "created_at": datetime.now().isoformat(),
            },
        )
    except StoreError as e:
        logger.error(f"Failed to log admin action {action.value} on {target_id}: {e.detail}")


async def _set_banned(session: UserSession, user_id: str, banned: bool) -> Dict:
    user_id = str(user_id)
    if banned and user_id == session.user_id:
        raise ValidationError("Administrators cannot ban themselves")

    updated = await execute_query(
        table="profiles",
        query_type="update",
        filters={"id": user_id},
        data={"is_banned": banned, "updated_at": datetime.now().isoformat()},
    )
    if not updated:
        raise NotFoundError("User not found")
    return updated[0]


async def ban_user(session: UserSession, user_id: str, reason: str) -> Dict:
    profile = await _set_banned(session, user_id, True)
    logger.info(f"Admin {session.user_id} banned user {user_id}: {reason}")
    await log_action(session.user_id, AdminActionType.BAN_USER, str(user_id), reason=reason)
    return profile


async def unban_user(session: UserSession, user_id: str) -> Dict:
    profile = await _set_banned(session, user_id, False)
    logger.info(f"Admin {session.user_id} unbanned user {user_id}")
    await log_action(session.user_id, AdminActionType.UNBAN_USER, str(user_id))
    return profile


async def send_platform_message(session: UserSession, message: AdminMessageCreate) -> Dict:
    created = await execute_query(
        table="admin_messages",
        query_type="insert",
        data={
            **message.model_dump(mode="json"),
            "is_active": True,
            "created_by": session.user_id,
            "created_at": datetime.now().isoformat(),
        },
    )
    if not created:
        raise StoreError("Failed to create platform message")

    logger.info(f"Admin {session.user_id} sent platform message '{message.title}'")
    await log_action(
        session.user_id,
        AdminActionType.SEND_MESSAGE,
        "platform",
        details={"title": message.title, "type": message.type.value},
    )
    return created[0]


async def list_messages(active_only: bool = True) -> List[Dict]:
    return await execute_query(
        table="admin_messages",
        query_type="select",
        filters={"is_active": True} if active_only else None,
        order_by={"created_at": "desc"},
    )


async def deactivate_message(session: UserSession, message_id: str) -> Dict:
    updated = await execute_query(
        table="admin_messages",
        query_type="update",
        filters={"id": str(message_id)},
        data={"is_active": False},
    )
    if not updated:
        raise NotFoundError("Message not found")

    await log_action(session.user_id, AdminActionType.DEACTIVATE_MESSAGE, str(message_id))
    return updated[0]
