"""WebSocket relay endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Request,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from intake_tracker.api.admin import require_api_key
from intake_tracker.api.request_models import RelayMessage  # noqa: TC001

if TYPE_CHECKING:
    from intake_tracker.containers import AppContainer

router = APIRouter(prefix="/relay", tags=["relay"])

_logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def relay_socket(websocket: WebSocket) -> None:
    """Register a client and echo its messages until it disconnects."""
    container: AppContainer = websocket.app.state.container
    hub = container.relay_hub
    client_id = await hub.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            await hub.handle_message(client_id, data)
    except WebSocketDisconnect:
        pass
    finally:
        await hub.disconnect(client_id)


@router.post("/messages", dependencies=[Depends(require_api_key)])
async def post_message(payload: RelayMessage, request: Request) -> dict[str, object]:
    """Broadcast a message or deliver it to one client."""
    container: AppContainer = request.app.state.container
    hub = container.relay_hub
    message = payload.model_dump(by_alias=True, exclude_none=True)
    if payload.type == "broadcast":
        delivered = await hub.broadcast(message)
        return {"status": "Message broadcasted", "delivered": delivered}
    if payload.type == "direct" and payload.client_id:
        if not await hub.send_to_client(payload.client_id, message):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Client not found"
            )
        return {"status": "Message sent"}
    _logger.info("Rejected relay message of type %s", payload.type)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Expected a broadcast or direct message",
    )
