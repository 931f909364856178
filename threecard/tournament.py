from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .models import GamePhase, Player, Room

LOGGER = logging.getLogger("three_card_engine")


@dataclass
class TournamentResult:
    champion: Optional[Player]
    rankings: List[Player]


def roster(room: Room) -> List[Player]:
    return [player for player in room.players if player.id in room.tournament_players]


def prune_roster(room: Room) -> List[str]:
    room.tournament_players = [player.id for player in roster(room) if player.money > 0]
    return room.tournament_players


def is_tournament_over(room: Room) -> bool:
    return len(room.tournament_players) <= 1 or room.hands_played >= room.hand_limit


def final_rankings(room: Room) -> List[Player]:
    # sorted() is stable, so equal balances keep seat order.
    return sorted(room.players, key=lambda player: player.money, reverse=True)


def champion(room: Room) -> Optional[Player]:
    # First survivor in seat order, even when the hand cap leaves several.
    survivors = roster(room)
    return survivors[0] if survivors else None


def conclude(room: Room) -> TournamentResult:
    room.phase = GamePhase.ENDED
    room.current_turn = None
    result = TournamentResult(champion=champion(room), rankings=final_rankings(room))
    LOGGER.info(
        "Tournament over room=%s hands=%s champion=%s",
        room.code,
        room.hands_played,
        result.champion.name if result.champion else None,
    )
    return result
