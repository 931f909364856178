from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Dict, List, Mapping, Optional

import websockets
from websockets.asyncio.server import ServerConnection, serve
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from threecard.errors import GameError
from threecard.lobby import Lobby, error_event
from threecard.models import Event, RoomConfig

LOGGER = logging.getLogger("three_card_host")

# HostServer glues the room engines to WebSocket clients. Every network
# concern lives here; the engines stay pure and only hand back events.


@dataclass
class RoomChannel:
    """Per-room serialization: one lock and the pending next-hand timer."""

    code: str
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    next_hand_task: Optional[asyncio.Task] = None

    def cancel_timer(self) -> None:
        if self.next_hand_task and not self.next_hand_task.done():
            self.next_hand_task.cancel()
        self.next_hand_task = None


class HostServer:
    def __init__(self, config: RoomConfig, lobby: Optional[Lobby] = None) -> None:
        self.config = config
        self.lobby = lobby or Lobby(config)
        self.connections: Dict[str, ServerConnection] = {}
        self.channels: Dict[str, RoomChannel] = {}
        # Guards intents that are not tied to an existing room yet.
        self.lobby_lock = asyncio.Lock()
        self.started_at = time.monotonic()

    async def start(self, host: str = "0.0.0.0", port: int = 3000) -> None:
        async with serve(self._handle_connection, host, port, process_request=self._process_request):
            LOGGER.info("Host server listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        session_id = uuid.uuid4().hex
        self.connections[session_id] = websocket
        LOGGER.info("Client connected: %s", session_id)
        await self._send_json(websocket, "connected", {"player_id": session_id, "message": "Connected"})
        try:
            async for raw in websocket:
                await self._handle_message(session_id, self._decode(raw))
        except websockets.ConnectionClosed:
            pass
        finally:
            self.connections.pop(session_id, None)
            await self._handle_disconnect(session_id)
            LOGGER.info("Client disconnected: %s", session_id)

    async def _handle_message(self, session_id: str, message: Mapping[str, object]) -> None:
        if not message:
            await self._deliver([error_event(session_id, GameError("BAD_SCHEMA", "Expected a JSON object"))])
            return

        code = self._room_key(session_id, message)
        if code and code in self.lobby.rooms:
            async with self._channel(code).lock:
                events = self.lobby.handle(session_id, message)
        else:
            async with self.lobby_lock:
                events = self.lobby.handle(session_id, message)

        LOGGER.debug("Handled %s from %s -> %s", message.get("type"), session_id, [event.ev for event in events])
        await self._deliver(events)
        self._sync_room(self.lobby.room_code_for(session_id) or code)

    async def _handle_disconnect(self, session_id: str) -> None:
        code = self.lobby.room_code_for(session_id)
        if code is None:
            return
        async with self._channel(code).lock:
            events = self.lobby.disconnect(session_id)
        await self._deliver(events)
        self._sync_room(code)

    # Next-hand timer -------------------------------------------------

    def _sync_room(self, code: Optional[str]) -> None:
        """Arm the next-hand timer or drop the channel of a closed room."""
        if not code:
            return
        engine = self.lobby.rooms.get(code)
        if engine is None:
            channel = self.channels.pop(code, None)
            if channel:
                channel.cancel_timer()
            return
        if engine.awaiting_next_hand:
            channel = self._channel(code)
            if channel.next_hand_task is None:
                channel.next_hand_task = asyncio.create_task(self._next_hand_after_delay(channel))

    async def _next_hand_after_delay(self, channel: RoomChannel) -> None:
        await asyncio.sleep(self.config.next_hand_delay_ms / 1000)
        async with channel.lock:
            channel.next_hand_task = None
            events = self.lobby.start_next_hand(channel.code)
        await self._deliver(events)
        self._sync_room(channel.code)

    def _channel(self, code: str) -> RoomChannel:
        channel = self.channels.get(code)
        if channel is None:
            channel = RoomChannel(code=code)
            self.channels[code] = channel
        return channel

    def _room_key(self, session_id: str, message: Mapping[str, object]) -> Optional[str]:
        room_code = message.get("room_code")
        if isinstance(room_code, str) and room_code.strip():
            return room_code.strip().upper()
        return self.lobby.room_code_for(session_id)

    # Delivery --------------------------------------------------------

    async def _deliver(self, events: List[Event]) -> None:
        for event in events:
            targets = [self.connections[pid] for pid in event.to if pid in self.connections]
            if not targets:
                continue
            message = self._envelope(event.ev, event.data)
            await asyncio.gather(*(socket.send(message) for socket in targets), return_exceptions=True)

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body: Dict[str, object] = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    def _decode(self, raw: object) -> Dict[str, object]:
        try:
            message = json.loads(raw)  # type: ignore[arg-type]
        except (TypeError, json.JSONDecodeError):
            return {}
        return message if isinstance(message, dict) else {}

    # HTTP status -----------------------------------------------------

    def status_payload(self) -> Dict[str, object]:
        return {
            "message": "Three-card tournament server",
            "status": "healthy",
            "uptime": round(time.monotonic() - self.started_at, 3),
            "rooms": len(self.lobby.rooms),
            "connections": len(self.connections),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def _process_request(self, connection: ServerConnection, request: Request) -> Optional[Response]:
        """Answer plain HTTP health checks on the WebSocket port."""
        if request.headers.get("Upgrade", "").lower() == "websocket":
            return None  # let the WebSocket handshake continue

        path = request.path.split("?", 1)[0]
        if path in {"/", "/health"}:
            return self._json_response(HTTPStatus.OK, self.status_payload())
        return self._json_response(HTTPStatus.NOT_FOUND, {"error": "not found"})

    def _json_response(self, status: HTTPStatus, payload: Dict[str, object]) -> Response:
        body = json.dumps(payload).encode("utf-8")
        headers = Headers([("Content-Type", "application/json"), ("Content-Length", str(len(body)))])
        return Response(status.value, status.phrase, headers, body)
