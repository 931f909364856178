"""Three-card tournament engine primitives shared by the host server."""

from .cards import RANKS, SUITS, Card, build_deck, deal, parse_cards, shuffle_deck
from .errors import GameError
from .evaluator import HandCategory, HandEvaluation, compare_hands, evaluate_hand
from .game import GameEngine
from .lobby import Lobby
from .models import Event, GamePhase, Player, PlayerStatus, Room, RoomConfig
from .registry import InMemoryRepository, SessionInfo

__all__ = [
    "RANKS",
    "SUITS",
    "Card",
    "build_deck",
    "deal",
    "parse_cards",
    "shuffle_deck",
    "GameError",
    "HandCategory",
    "HandEvaluation",
    "compare_hands",
    "evaluate_hand",
    "GameEngine",
    "Lobby",
    "Event",
    "GamePhase",
    "Player",
    "PlayerStatus",
    "Room",
    "RoomConfig",
    "InMemoryRepository",
    "SessionInfo",
]
