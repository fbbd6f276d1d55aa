"""
Best-effort notifications to the counterpart of a lifecycle event.

Delivery is at-most-once: a notification is written to the `notifications`
table once, and any failure is logged and dropped. Callers never see an
exception from here, and the operation that triggered the notification is
never rolled back because of it. Notifications are not ordered relative to the
realtime change feed the recipient's client listens to.
"""

import logging
from datetime import datetime
from typing import Optional
from ..core.supabase import execute_query
from ..schemas.notification import NotificationType

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
BODY_MAX_LENGTH = 500


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


async def notify(
    to_user_id: str,
    event_type: NotificationType,
    title: str,
    body: str,
    related_id: Optional[str] = None,
) -> bool:
    """Send a notification; returns False when it could not be delivered."""
    event_type = NotificationType(event_type)
    logger.info(f"Sending {event_type.value} notification to {to_user_id}: {title}")

    notification_data = {
        "user_id": str(to_user_id),
        "type": event_type.value,
        "title": _clip(title, TITLE_MAX_LENGTH),
        "message": _clip(body, BODY_MAX_LENGTH),
        "related_id": str(related_id) if related_id else None,
        "is_read": False,
        "created_at": datetime.now().isoformat(),
    }

    try:
        await execute_query(table="notifications", query_type="insert", data=notification_data)
    except Exception as e:
        logger.warning(f"Failed to deliver {event_type.value} notification to {to_user_id}: {e}")
        return False

    return True
