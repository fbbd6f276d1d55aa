import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict
from fastapi import HTTPException, WebSocket, WebSocketDisconnect, status
from ...core.security import session_for_token

logger = logging.getLogger(__name__)

Subscribe = Callable[[str, Callable[[Dict[str, Any]], None]], Awaitable[Callable[[], Awaitable[None]]]]


async def stream_updates(websocket: WebSocket, token: str, subscribe: Subscribe, feed: str) -> None:
    """
    Authenticate a socket by its `token` query parameter and forward every
    update from `subscribe` to it until the client disconnects.

    Invalid tokens and banned users are closed with 1008 before the socket is
    accepted; a failing subscription closes it with 1011.
    """
    try:
        session = await session_for_token(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    if session.is_banned:
        logger.info(f"Refused {feed} socket for banned user {session.user_id}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = None
    forward_task = None

    async def forward():
        while True:
            await websocket.send_json(await queue.get())

    try:
        unsubscribe = await subscribe(session.user_id, queue.put_nowait)
        forward_task = asyncio.create_task(forward())
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"{feed} socket closed for {session.user_id}")
    except Exception as e:
        logger.error(f"{feed} socket for {session.user_id} failed: {e}")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
    finally:
        if forward_task is not None:
            forward_task.cancel()
            [outcome] = await asyncio.gather(forward_task, return_exceptions=True)
            if isinstance(outcome, Exception):
                logger.warning(f"Forwarding {feed} to {session.user_id} stopped: {outcome}")
        if unsubscribe is not None:
            await unsubscribe()
