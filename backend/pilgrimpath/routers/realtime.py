import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pilgrimpath.core.websocket import manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Subscribers only listen; anything other than ``ping`` is ignored."""
    await manager.connect(websocket)
    logger.info("Subscriber connected (%d active)", len(manager.active_connections))
    try:
        while True:
            data = await websocket.receive_text()
            if data.strip() == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        manager.disconnect(websocket)
        logger.info("Subscriber disconnected (%d active)", len(manager.active_connections))
