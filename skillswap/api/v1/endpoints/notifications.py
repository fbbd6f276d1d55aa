from fastapi import APIRouter, HTTPException, status, Depends, Path, Query
from typing import List, Optional
from pydantic import UUID4
from ....core.supabase import execute_query, fetch_one
from ....core.security import get_current_session
from ....schemas.notification import NotificationResponse, NotificationType, NotificationUpdate
from ....schemas.user import UserSession

router = APIRouter(tags=["notifications"])

async def _owned_notification(notification_id: UUID4, user_id: str) -> dict:
    notification = await fetch_one("notifications", {"id": str(notification_id)})

    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )

    if notification["user_id"] != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to access this notification"
        )

    return notification

@router.get("/", response_model=List[NotificationResponse])
async def get_notifications(
    is_read: Optional[bool] = None,
    type: Optional[NotificationType] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    session: UserSession = Depends(get_current_session)
):
    """
    Get the current user's notifications, newest first.
    """
    filters = {"user_id": session.user_id}

    if is_read is not None:
        filters["is_read"] = is_read

    if type:
        filters["type"] = type.value

    notifications = await execute_query(
        table="notifications",
        query_type="select",
        filters=filters,
        order_by={"created_at": "desc"},
        limit=skip + limit
    )

    return notifications[skip:skip + limit]

@router.patch("/{notification_id}", response_model=NotificationResponse)
async def mark_notification(
    notification_update: NotificationUpdate,
    notification_id: UUID4 = Path(...),
    session: UserSession = Depends(get_current_session)
):
    """
    Mark a notification as read or unread.
    """
    await _owned_notification(notification_id, session.user_id)

    updated_notification = await execute_query(
        table="notifications",
        query_type="update",
        filters={"id": str(notification_id)},
        data={"is_read": notification_update.is_read}
    )

    if not updated_notification:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update notification"
        )

    return updated_notification[0]

@router.patch("/", response_model=List[NotificationResponse])
async def mark_all_notifications(
    notification_update: NotificationUpdate,
    type: Optional[NotificationType] = None,
    session: UserSession = Depends(get_current_session)
):
    """
    Mark all of the current user's notifications as read or unread.
    """
    filters = {"user_id": session.user_id}

    if type:
        filters["type"] = type.value

    return await execute_query(
        table="notifications",
        query_type="update",
        filters=filters,
        data={"is_read": notification_update.is_read}
    )

@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID4 = Path(...),
    session: UserSession = Depends(get_current_session)
):
    """
    Delete a notification.
    """
    await _owned_notification(notification_id, session.user_id)

    await execute_query(
        table="notifications",
        query_type="delete",
        filters={"id": str(notification_id)}
    )

    return None
