from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .cards import Card


class GamePhase(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    ENDED = "ended"


class PlayerStatus(str, Enum):
    ACTIVE = "active"
    FOLDED = "folded"
    ALL_IN = "all_in"
    ELIMINATED = "eliminated"


@dataclass
class RoomConfig:
    starting_money: int = 10_000
    ante: int = 100
    min_players: int = 2
    max_players: int = 8
    next_hand_delay_ms: int = 3_000
    # None caps the tournament at one hand per starting player.
    hand_cap: Optional[int] = None


@dataclass
class Player:
    id: str
    name: str
    money: int
    position: int
    hand: List[Card] = field(default_factory=list)
    has_viewed_cards: bool = False
    status: PlayerStatus = PlayerStatus.ACTIVE
    acted_this_round: bool = False
    current_bet: int = 0
    connected: bool = True

    @property
    def in_hand(self) -> bool:
        return self.status in (PlayerStatus.ACTIVE, PlayerStatus.ALL_IN)

    @property
    def is_contender(self) -> bool:
        return self.in_hand and self.money > 0

    @property
    def can_act(self) -> bool:
        return self.status == PlayerStatus.ACTIVE and self.money > 0

    def reset_for_hand(self) -> None:
        self.hand.clear()
        self.has_viewed_cards = False
        self.status = PlayerStatus.ACTIVE
        self.acted_this_round = False
        self.current_bet = 0

    def public_state(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "money": self.money,
            "position": self.position,
            "status": self.status.value,
            "has_viewed_cards": self.has_viewed_cards,
            "acted_this_round": self.acted_this_round,
            "current_bet": self.current_bet,
            "card_count": len(self.hand),
            "connected": self.connected,
        }


@dataclass(frozen=True)
class BetRecord:
    player_id: str
    player_name: str
    declared_amount: int
    actual_amount: int
    viewed_cards: bool
    action: str = "bet"
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, object]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "action": self.action,
            "declared_amount": self.declared_amount,
            "actual_amount": self.actual_amount,
            "viewed_cards": self.viewed_cards,
            "timestamp": self.timestamp,
        }


@dataclass
class Room:
    code: str
    host: str
    players: List[Player] = field(default_factory=list)
    phase: GamePhase = GamePhase.WAITING
    current_round: int = 0
    dealer_index: Optional[int] = None
    pot: int = 0
    min_bet: int = 0
    bet_history: List[BetRecord] = field(default_factory=list)
    current_turn: Optional[int] = None
    hands_played: int = 0
    starting_player_count: int = 0
    hand_limit: int = 0
    tournament_players: List[str] = field(default_factory=list)
    deck: List[Card] = field(default_factory=list)
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def seat_of(self, player_id: str) -> Optional[int]:
        for idx, player in enumerate(self.players):
            if player.id == player_id:
                return idx
        return None

    def contenders(self) -> List[Player]:
        return [player for player in self.players if player.is_contender]

    def connected_ids(self) -> Tuple[str, ...]:
        return tuple(player.id for player in self.players if player.connected)


@dataclass
class Event:
    ev: str
    data: Dict[str, object] = field(default_factory=dict)
    to: Tuple[str, ...] = ()
