from fastapi import APIRouter, status, Depends, Path, Query, WebSocket
from typing import List, Optional
from pydantic import UUID4
from ....core.security import get_current_session
from ....schemas.swap import (
    ExchangeCreate,
    ExchangeResult,
    SwapCreate,
    SwapResponse,
    SwapRole,
    SwapStatus,
)
from ....schemas.user import UserSession
from ....services import realtime, swap_lifecycle
from ..streaming import stream_updates

router = APIRouter(tags=["swaps"])

@router.post("/", response_model=SwapResponse, status_code=status.HTTP_201_CREATED)
async def create_swap_request(
    swap: SwapCreate,
    session: UserSession = Depends(get_current_session)
):
    """
    Send a swap request.

    The requester must offer `skill_offered` and the recipient must offer
    `skill_wanted`. The message is required (20 to 1000 characters).
    """
    return await swap_lifecycle.create_swap_request(
        session,
        str(swap.to_user_id),
        swap.skill_offered,
        swap.skill_wanted,
        swap.message,
    )

@router.post("/exchange", response_model=ExchangeResult)
async def create_exchange(
    exchange: ExchangeCreate,
    session: UserSession = Depends(get_current_session)
):
    """
    Propose several skill pairs to one user; one swap request is created per pair.

    Creation stops at the first failing pair. Requests created before it are
    kept and reported in `created`, the failure in `failed`.
    """
    return await swap_lifecycle.create_exchange(
        session,
        str(exchange.to_user_id),
        exchange.exchanges,
        exchange.message,
    )

@router.get("/", response_model=List[SwapResponse])
async def get_swaps(
    status: Optional[SwapStatus] = None,
    role: Optional[SwapRole] = Query(None, description="Only requests you sent or received"),
    session: UserSession = Depends(get_current_session)
):
    """Get the current user's swap requests, newest first."""
    return await swap_lifecycle.list_for_user(session.user_id, status=status, role=role)

@router.websocket("/ws")
async def swap_updates(websocket: WebSocket, token: str = Query(...)):
    """
    Push swap request changes for the authenticated user.

    Each message is {"id", "type", "data", "user_id"}; clients should reload
    their list when one arrives.
    """
    await stream_updates(websocket, token, realtime.subscribe_to_swap_updates, "Swap updates")

@router.get("/{swap_id}", response_model=SwapResponse)
async def get_swap(
    swap_id: UUID4 = Path(...),
    session: UserSession = Depends(get_current_session)
):
    """Get a swap request you take part in."""
    return await swap_lifecycle.get_swap(session, str(swap_id))

@router.post("/{swap_id}/accept", response_model=SwapResponse)
async def accept_swap(
    swap_id: UUID4 = Path(...),
    session: UserSession = Depends(get_current_session)
):
    """Accept a pending request (recipient only)."""
    return await swap_lifecycle.accept(session, str(swap_id))

@router.post("/{swap_id}/reject", response_model=SwapResponse)
async def reject_swap(
    swap_id: UUID4 = Path(...),
    session: UserSession = Depends(get_current_session)
):
    """Reject a pending request (recipient only)."""
    return await swap_lifecycle.reject(session, str(swap_id))

@router.post("/{swap_id}/cancel", response_model=SwapResponse)
async def cancel_swap(
    swap_id: UUID4 = Path(...),
    session: UserSession = Depends(get_current_session)
):
    """Cancel a pending request (requester only)."""
    return await swap_lifecycle.cancel(session, str(swap_id))

@router.post("/{swap_id}/complete", response_model=SwapResponse)
async def complete_swap(
    swap_id: UUID4 = Path(...),
    session: UserSession = Depends(get_current_session)
):
    """Mark an accepted swap as completed (either participant)."""
    return await swap_lifecycle.complete(session, str(swap_id))

@router.delete("/{swap_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_swap(
    swap_id: UUID4 = Path(...),
    session: UserSession = Depends(get_current_session)
):
    """Withdraw a pending request you sent."""
    await swap_lifecycle.delete_swap_request(session, str(swap_id))
    return None
