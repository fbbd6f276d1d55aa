"""
Swap request and profile change feeds.

Supabase Realtime delivers inserts, updates and deletes on `swap_requests`
and `profiles`.
Events arrive unordered relative to the caller's own writes, and a client will
also receive the echo of its own changes. Consumers should treat every event
as "reload the list" rather than apply it as a patch.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional
from ..core.supabase import get_async_supabase_client
from ..schemas.swap import SwapStatus

logger = logging.getLogger(__name__)

NEW_REQUEST = "new_request"
REQUEST_DELETED = "request_deleted"
PROFILE_UPDATED = "profile_updated"
PROFILE_DELETED = "profile_deleted"

UPDATE_TYPES = {
    SwapStatus.PENDING.value: NEW_REQUEST,
    SwapStatus.ACCEPTED.value: "request_accepted",
    SwapStatus.REJECTED.value: "request_rejected",
    SwapStatus.COMPLETED.value: "request_completed",
    SwapStatus.CANCELLED.value: "request_cancelled",
}


def _change_parts(payload: Dict[str, Any]):
    data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
    event = (data.get("type") or data.get("eventType") or "").upper()
    record = data.get("record") or data.get("new") or {}
    old_record = data.get("old_record") or data.get("old") or {}
    return event, record, old_record


def classify_swap_change(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Turn a postgres_changes payload into {"id", "type", "data"}.

    Accepts both the realtime client's nested shape ({"data": {"type",
    "record", "old_record"}}) and the flat one ({"eventType", "new", "old"}).
    Returns None for events that are not row changes.
    """
    event, record, old_record = _change_parts(payload)

    if event == "INSERT":
        update_type = NEW_REQUEST
    elif event == "UPDATE":
        update_type = UPDATE_TYPES.get(record.get("status"), NEW_REQUEST)
    elif event == "DELETE":
        update_type = REQUEST_DELETED
    else:
        return None

    row = record or old_record
    return {"id": row.get("id"), "type": update_type, "data": row}


async def subscribe_to_swap_updates(
    user_id: str,
    on_update: Callable[[Dict[str, Any]], None],
) -> Callable[[], Awaitable[None]]:
    """
    Subscribe to changes on the user's swap requests, sent or received.

    Realtime filters take a single column, so the channel listens on
    `from_user_id` and `to_user_id` separately. Returns a coroutine function
    that removes the channel.
    """
    client = await get_async_supabase_client()
    channel = client.channel(f"swap_requests:{user_id}")

    def handle(payload):
        update = classify_swap_change(payload)
        if update is None:
            return
        logger.debug(f"Realtime swap update for {user_id}: {update['type']} {update['id']}")
        on_update({**update, "user_id": user_id})

    for column in ("from_user_id", "to_user_id"):
        channel.on_postgres_changes(
            "*",
            schema="public",
            table="swap_requests",
            filter=f"{column}=eq.{user_id}",
            callback=handle,
        )

    await channel.subscribe()
    logger.info(f"Subscribed to swap updates for {user_id}")

    async def unsubscribe():
        await client.remove_channel(channel)
        logger.info(f"Unsubscribed from swap updates for {user_id}")

    return unsubscribe


def classify_profile_change(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Turn a `profiles` change into {"id", "type", "data"}, or None."""
    event, record, old_record = _change_parts(payload)
    if event in ("INSERT", "UPDATE"):
        update_type = PROFILE_UPDATED
    elif event == "DELETE":
        update_type = PROFILE_DELETED
    else:
        return None

    row = record or old_record
    return {"id": row.get("id"), "type": update_type, "data": row}


async def subscribe_to_profile_updates(
    user_id: str,
    on_update: Callable[[Dict[str, Any]], None],
) -> Callable[[], Awaitable[None]]:
    """Subscribe to changes on the user's own profile row (ban, rating, stats)."""
    client = await get_async_supabase_client()
    channel = client.channel(f"profiles:{user_id}")

    def handle(payload):
        update = classify_profile_change(payload)
        if update is None:
            return
        logger.debug(f"Realtime profile update for {user_id}: {update['type']}")
        on_update({**update, "user_id": user_id})

    channel.on_postgres_changes(
        "*",
        schema="public",
        table="profiles",
        filter=f"id=eq.{user_id}",
        callback=handle,
    )

    await channel.subscribe()
    logger.info(f"Subscribed to profile updates for {user_id}")

    async def unsubscribe():
        await client.remove_channel(channel)
        logger.info(f"Unsubscribed from profile updates for {user_id}")

    return unsubscribe
