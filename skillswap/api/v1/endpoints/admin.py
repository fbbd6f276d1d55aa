from fastapi import APIRouter, status, Depends, Path
from typing import List
from pydantic import UUID4
from ....core.security import get_current_session, require_admin
from ....schemas.admin import AdminMessageCreate, AdminMessageResponse, BanRequest
from ....schemas.user import ProfileResponse, UserSession
from ....services import admin_service

router = APIRouter(tags=["admin"])

@router.post("/users/{user_id}/ban", response_model=ProfileResponse)
async def ban_user(
    ban: BanRequest,
    user_id: UUID4 = Path(...),
    session: UserSession = Depends(require_admin)
):
    """Ban a user; banned users are hidden from browsing and cannot use the API."""
    return await admin_service.ban_user(session, str(user_id), ban.reason)

@router.post("/users/{user_id}/unban", response_model=ProfileResponse)
async def unban_user(
    user_id: UUID4 = Path(...),
    session: UserSession = Depends(require_admin)
):
    return await admin_service.unban_user(session, str(user_id))

@router.post("/messages", response_model=AdminMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_platform_message(
    message: AdminMessageCreate,
    session: UserSession = Depends(require_admin)
):
    """Broadcast a platform message to all users."""
    return await admin_service.send_platform_message(session, message)

@router.get("/messages", response_model=List[AdminMessageResponse])
async def list_all_messages(session: UserSession = Depends(require_admin)):
    """All platform messages, including deactivated ones."""
    return await admin_service.list_messages(active_only=False)

@router.delete("/messages/{message_id}", response_model=AdminMessageResponse)
async def deactivate_message(
    message_id: UUID4 = Path(...),
    session: UserSession = Depends(require_admin)
):
    return await admin_service.deactivate_message(session, str(message_id))

# Readable by every signed-in user, so it sits outside the admin-only routes above.
messages_router = APIRouter(tags=["messages"])

@messages_router.get("/", response_model=List[AdminMessageResponse])
async def list_active_messages(session: UserSession = Depends(get_current_session)):
    """Platform messages that are currently active."""
    return await admin_service.list_messages(active_only=True)
