import asyncio
import logging
from typing import Callable
from fastapi import WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


async def _forward(websocket: WebSocket, outbox: asyncio.Queue):
    while True:
        message = await outbox.get()
        await websocket.send_json(message)


async def stream_snapshots(websocket: WebSocket, subscribe: Callable, serialize: Callable):
    """
    Pipe a live query to a WebSocket client until it disconnects.

    ``subscribe(on_change, on_error)`` registers the live query and returns its
    unsubscribe callable. Snapshots arrive on the live query worker thread and are
    handed to the event loop as ``{"type": "snapshot", "data": [...]}``
    messages; failures are sent as ``{"type": "error", "data": message}``.
    """
    await websocket.accept()
    loop = asyncio.get_running_loop()
    outbox: asyncio.Queue = asyncio.Queue()

    def on_change(items):
        message = {"type": "snapshot", "data": serialize(items)}
        loop.call_soon_threadsafe(outbox.put_nowait, message)

    def on_error(error):
        message = {"type": "error", "data": error.message}
        loop.call_soon_threadsafe(outbox.put_nowait, message)

    unsubscribe = await run_in_threadpool(subscribe, on_change, on_error)
    sender = asyncio.create_task(_forward(websocket, outbox))
    try:
        while True:
            # Clients only ever close; anything they send is ignored
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Live query client disconnected")
    finally:
        sender.cancel()
        unsubscribe()
