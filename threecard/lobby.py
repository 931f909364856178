from __future__ import annotations

import logging
import random
import secrets
import string
import time
from typing import Callable, Dict, List, Mapping, Optional

from .errors import GameError
from .game import GameEngine
from .models import Event, RoomConfig
from .registry import InMemoryRepository, SessionInfo

LOGGER = logging.getLogger("three_card_lobby")

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 6

Handler = Callable[[str, Mapping[str, object]], List[Event]]


def generate_room_code() -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def error_event(session_id: str, exc: GameError) -> Event:
    return Event("error", {"code": exc.code, "message": exc.msg}, (session_id,))


class Lobby:
    """Routes intents from sessions to the room engines they belong to.

    Both registries are injected so tests (or another storage backend) can
    supply their own.
    """

    def __init__(
        self,
        config: RoomConfig,
        rooms: Optional[InMemoryRepository[str, GameEngine]] = None,
        sessions: Optional[InMemoryRepository[str, SessionInfo]] = None,
        code_factory: Callable[[], str] = generate_room_code,
        rng_factory: Callable[[], random.Random] = random.Random,
    ) -> None:
        self.config = config
        self.rooms: InMemoryRepository[str, GameEngine] = rooms if rooms is not None else InMemoryRepository()
        self.sessions: InMemoryRepository[str, SessionInfo] = (
            sessions if sessions is not None else InMemoryRepository()
        )
        self.code_factory = code_factory
        self.rng_factory = rng_factory
        self._handlers: Dict[str, Handler] = {
            "ping": self._on_ping,
            "get-room-info": self._on_room_info,
            "create-room": self._on_create_room,
            "join-room": self._on_join_room,
            "start-game": self._on_start_game,
            "view-cards": self._on_view_cards,
            "place-bet": self._on_place_bet,
            "fold": self._on_fold,
            "all-in": self._on_all_in,
            "compare-cards": self._on_compare_cards,
        }

    # Public API ------------------------------------------------------

    def handle(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        msg_type = message.get("type")
        handler = self._handlers.get(msg_type) if isinstance(msg_type, str) else None
        try:
            if handler is None:
                raise GameError("UNKNOWN_TYPE", "Unsupported message type")
            return handler(session_id, message)
        except GameError as exc:
            LOGGER.warning("Rejected %s from %s: %s (%s)", msg_type, session_id, exc.msg, exc.code)
            return [error_event(session_id, exc)]

    def create_room(self, session_id: str, player_name: object) -> List[Event]:
        self._require_free(session_id)
        code = self._unique_code()
        engine = GameEngine(code, session_id, self.config, rng=self.rng_factory())
        player = engine.add_player(session_id, player_name)  # type: ignore[arg-type]
        self.rooms.set(code, engine)
        self.sessions.set(session_id, SessionInfo(room_code=code, player_name=player.name))
        LOGGER.info("Room %s created by %s (%s)", code, player.name, session_id)
        return [
            Event(
                "room-created",
                {"room_code": code, "player_id": session_id, "message": "Room created"},
                (session_id,),
            ),
            engine.room_updated(),
        ]

    def join_room(self, session_id: str, room_code: object, player_name: object) -> List[Event]:
        self._require_free(session_id)
        engine = self.get_room(room_code)
        player = engine.add_player(session_id, player_name)  # type: ignore[arg-type]
        code = engine.room.code
        self.sessions.set(session_id, SessionInfo(room_code=code, player_name=player.name))
        LOGGER.info("%s (%s) joined room %s", player.name, session_id, code)
        return [
            Event(
                "room-joined",
                {"room_code": code, "player_id": session_id, "message": "Joined room"},
                (session_id,),
            ),
            engine.room_updated(),
        ]

    def get_room(self, room_code: object) -> GameEngine:
        if not isinstance(room_code, str) or not room_code.strip():
            raise GameError("BAD_SCHEMA", "room_code required")
        engine = self.rooms.get(room_code.strip().upper())
        if engine is None:
            raise GameError("ROOM_NOT_FOUND", "Room does not exist")
        return engine

    def room_code_for(self, session_id: str) -> Optional[str]:
        info = self.sessions.get(session_id)
        return info.room_code if info else None

    def start_next_hand(self, room_code: str) -> List[Event]:
        engine = self.rooms.get(room_code)
        if engine is None:
            return []
        return engine.start_next_hand()

    def disconnect(self, session_id: str) -> List[Event]:
        info = self.sessions.delete(session_id)
        if info is None:
            return []
        engine = self.rooms.get(info.room_code)
        if engine is None:
            return []
        try:
            events = engine.disconnect(session_id)
        except GameError as exc:
            LOGGER.warning("Disconnect of %s from %s ignored: %s", session_id, info.room_code, exc.msg)
            return []
        if engine.closed or not engine.room.connected_ids():
            self.rooms.delete(info.room_code)
            for player in engine.room.players:
                self.sessions.delete(player.id)
            LOGGER.info("Room %s closed", info.room_code)
        return events

    # Intent handlers -------------------------------------------------

    def _on_ping(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        return [Event("pong", {"timestamp": int(time.time() * 1000)}, (session_id,))]

    def _on_room_info(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        engine = self.get_room(message.get("room_code"))
        return [Event("room-updated", engine.room_state(), (session_id,))]

    def _on_create_room(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        return self.create_room(session_id, message.get("player_name"))

    def _on_join_room(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        return self.join_room(session_id, message.get("room_code"), message.get("player_name"))

    def _on_start_game(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        return self.get_room(message.get("room_code")).start_game(session_id)

    def _on_view_cards(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        return self.get_room(message.get("room_code")).view_cards(session_id)

    def _on_place_bet(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        return self.get_room(message.get("room_code")).place_bet(session_id, message.get("amount"))

    def _on_fold(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        return self.get_room(message.get("room_code")).fold(session_id)

    def _on_all_in(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        return self.get_room(message.get("room_code")).all_in(session_id)

    def _on_compare_cards(self, session_id: str, message: Mapping[str, object]) -> List[Event]:
        target = message.get("target_player_id")
        if not isinstance(target, str):
            raise GameError("BAD_SCHEMA", "target_player_id required")
        return self.get_room(message.get("room_code")).compare_cards(session_id, target)

    # Helpers ---------------------------------------------------------

    def _require_free(self, session_id: str) -> None:
        if session_id in self.sessions:
            raise GameError("ALREADY_IN_ROOM", "You are already in a room")

    def _unique_code(self) -> str:
        code = self.code_factory()
        while code in self.rooms:
            code = self.code_factory()
        return code
