"""Message relay between connected WebSocket clients."""

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from intake_tracker.services.store import KeyValueStore

PRESENCE_PREFIX = "ws:"

_logger = logging.getLogger(__name__)


class RelaySocket(Protocol):
    """The subset of a WebSocket connection used by the relay."""

    async def accept(self) -> None:
        """Complete the connection handshake."""

    async def send_text(self, data: str) -> None:
        """Send a text frame."""


@dataclass
class RelayHub:
    """Relay that tracks live sockets and mirrors presence to the store.

    The in-memory table decides reachability. Presence entries in the store
    are advisory and may outlive their socket after an abnormal disconnect.
    """

    store: KeyValueStore
    sessions: dict[str, RelaySocket] = field(default_factory=dict)

    async def connect(self, socket: RelaySocket) -> str:
        """Accept a socket, register it and greet the client."""
        await socket.accept()
        client_id = str(uuid4())
        self.sessions[client_id] = socket
        await self.store.put(
            _presence_key(client_id),
            json.dumps({"connected": True, "connectedAt": _now()}),
        )
        await socket.send_text(
            json.dumps(
                {
                    "type": "connection",
                    "clientId": client_id,
                    "message": "Connected successfully",
                }
            )
        )
        _logger.info("Relay client connected: %s", client_id)
        return client_id

    async def handle_message(self, client_id: str, data: str) -> None:
        """Echo a client message back, stamped with its id and time."""
        socket = self.sessions.get(client_id)
        if socket is None:
            return
        try:
            message = json.loads(data)
        except json.JSONDecodeError:
            message = None
        if not isinstance(message, dict):
            await socket.send_text(
                json.dumps(
                    {
                        "type": "error",
                        "message": "Invalid message format",
                        "clientId": client_id,
                    }
                )
            )
            return
        response = {**message, "clientId": client_id, "timestamp": _now()}
        await socket.send_text(json.dumps(response))

    async def disconnect(self, client_id: str) -> None:
        """Forget a socket and its presence entry."""
        self.sessions.pop(client_id, None)
        await self.store.delete(_presence_key(client_id))
        _logger.info("Relay client disconnected: %s", client_id)

    async def broadcast(self, message: dict[str, object]) -> int:
        """Send a message to every present client with a live socket."""
        payload = json.dumps({**message, "timestamp": _now()})
        delivered = 0
        for key in await self.store.list(PRESENCE_PREFIX):
            socket = self.sessions.get(key.removeprefix(PRESENCE_PREFIX))
            if socket is None:
                continue
            await socket.send_text(payload)
            delivered += 1
        return delivered

    async def send_to_client(self, client_id: str, message: dict[str, object]) -> bool:
        """Send a message to one client; return whether it was reachable."""
        if await self.store.get(_presence_key(client_id)) is None:
            return False
        socket = self.sessions.get(client_id)
        if socket is None:
            return False
        await socket.send_text(json.dumps({**message, "timestamp": _now()}))
        return True


def _presence_key(client_id: str) -> str:
    return f"{PRESENCE_PREFIX}{client_id}"


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()
