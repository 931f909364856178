from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .cards import build_deck, deal, shuffle_deck
from .evaluator import HandEvaluation, evaluate_hand
from .models import Player, PlayerStatus, Room, RoomConfig
from .turns import first_seat_after_dealer

LOGGER = logging.getLogger("three_card_engine")

CARDS_PER_HAND = 3

# Hand lifecycle: dealing -> betting rounds -> resolved. These functions only
# touch the Room they are given; the engine decides when to call them.


@dataclass
class HandResult:
    winners: List[Player]
    pot: int
    share: int
    eliminated: List[Player] = field(default_factory=list)
    evaluations: Dict[str, HandEvaluation] = field(default_factory=dict)

    @property
    def winner(self) -> Optional[Player]:
        return self.winners[0] if self.winners else None


def start_new_hand(room: Room, config: RoomConfig, rng: Optional[random.Random] = None) -> Room:
    room.pot = 0
    room.min_bet = config.ante
    room.current_round = 1
    room.bet_history.clear()
    room.deck = shuffle_deck(build_deck(), rng)

    for player in room.players:
        player.reset_for_hand()
        if player.money <= 0:
            player.status = PlayerStatus.ELIMINATED
            continue
        ante = min(config.ante, player.money)
        player.money -= ante
        player.current_bet = ante
        room.pot += ante
        player.hand.extend(deal(room.deck, CARDS_PER_HAND))
        if not player.connected:
            player.status = PlayerStatus.FOLDED

    seats = len(room.players)
    room.dealer_index = 0 if room.dealer_index is None else (room.dealer_index + 1) % seats
    assert 0 <= room.dealer_index < seats
    room.current_turn = first_seat_after_dealer(room)
    room.hands_played += 1

    LOGGER.info(
        "New hand room=%s hand=%s dealer=%s turn=%s pot=%s",
        room.code,
        room.hands_played,
        room.dealer_index,
        room.current_turn,
        room.pot,
    )
    return room


def is_round_complete(room: Room) -> bool:
    return all(player.acted_this_round for player in room.players if player.can_act)


def advance_round(room: Room) -> bool:
    if len(room.contenders()) <= 1:
        return False
    for player in room.players:
        player.acted_this_round = False
    room.current_round += 1
    room.current_turn = first_seat_after_dealer(room)
    LOGGER.info("Room %s advanced to round %s (turn=%s)", room.code, room.current_round, room.current_turn)
    return True


def is_hand_finished(room: Room) -> bool:
    contenders = room.contenders()
    if len(contenders) <= 1:
        return True
    return not any(player.can_act for player in contenders)


def resolve_hand(room: Room) -> HandResult:
    """Pay out the pot.

    Only players still holding money can win. An all-in player has no money
    left and therefore never qualifies here.
    """
    contenders = room.contenders()
    room.current_turn = None

    evaluations: Dict[str, HandEvaluation] = {}
    if len(contenders) > 1:
        evaluations = {player.id: evaluate_hand(player.hand) for player in contenders}
        best = max(evaluations.values(), key=lambda evaluation: evaluation.strength)
        # Ties are decided on the tie-break value alone, whatever the category.
        winners = [player for player in contenders if evaluations[player.id].value == best.value]
    else:
        winners = list(contenders)

    share = 0
    if len(winners) == 1:
        share = room.pot
    elif winners:
        # Any remainder of the split is not paid out.
        share = room.pot // len(winners)
    for player in winners:
        player.money += share

    eliminated = [player for player in room.players if player.money <= 0]
    for player in room.players:
        assert player.money >= 0, f"negative balance for {player.id}"

    LOGGER.info(
        "Hand resolved room=%s pot=%s winners=%s share=%s",
        room.code,
        room.pot,
        [player.name for player in winners],
        share,
    )
    return HandResult(winners=winners, pot=room.pot, share=share, eliminated=eliminated, evaluations=evaluations)
