from __future__ import annotations

import random
from typing import List, Optional

from threecard.cards import parse_cards
from threecard.game import GameEngine
from threecard.models import Event, Player, RoomConfig


def create_engine(
    *,
    players: int = 2,
    starting_money: int = 1_000,
    ante: int = 100,
    hand_cap: Optional[int] = None,
    seed: int = 42,
) -> GameEngine:
    """Instantiate a room engine with ``players`` seated players (p0 hosts)."""
    config = RoomConfig(starting_money=starting_money, ante=ante, hand_cap=hand_cap, next_hand_delay_ms=0)
    engine = GameEngine("ROOM01", "p0", config, rng=random.Random(seed))
    for idx in range(players):
        engine.add_player(f"p{idx}", f"Player{idx}")
    return engine


def start_game(engine: GameEngine) -> List[Event]:
    return engine.start_game(engine.room.host)


def set_hands(engine: GameEngine, *hands: str) -> None:
    """Replace dealt cards seat by seat, e.g. set_hands(engine, "Ah Kh Qh", "2c 2d 9s")."""
    for player, labels in zip(engine.room.players, hands):
        player.hand = parse_cards(labels.split())


def actor(engine: GameEngine) -> Player:
    seat_idx = engine.room.current_turn
    assert seat_idx is not None
    return engine.room.players[seat_idx]


def player(engine: GameEngine, player_id: str) -> Player:
    found = engine.room.find_player(player_id)
    assert found is not None
    return found


def event_names(events: List[Event]) -> List[str]:
    return [event.ev for event in events]


def find_event(events: List[Event], name: str) -> Event:
    return next(event for event in events if event.ev == name)
