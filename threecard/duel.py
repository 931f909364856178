from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .betting import charged_amount, require_turn
from .errors import GameError
from .evaluator import HandEvaluation, compare_hands, evaluate_hand
from .models import Player, PlayerStatus, Room
from .turns import next_active_seat


@dataclass
class DuelResult:
    challenger: Player
    opponent: Player
    challenger_eval: HandEvaluation
    opponent_eval: HandEvaluation
    outcome: int  # compare_hands from the challenger's side

    @property
    def loser(self) -> Optional[Player]:
        if self.outcome > 0:
            return self.opponent
        if self.outcome < 0:
            return self.challenger
        return None

    def view_for(self, player_id: str) -> Dict[str, object]:
        """Private payload for one side of the duel."""
        mine_first = player_id == self.challenger.id
        me, other = (self.challenger, self.opponent) if mine_first else (self.opponent, self.challenger)
        my_eval, other_eval = (
            (self.challenger_eval, self.opponent_eval) if mine_first else (self.opponent_eval, self.challenger_eval)
        )
        outcome = self.outcome if mine_first else -self.outcome
        return {
            "opponent_id": other.id,
            "opponent": other.name,
            "result": "win" if outcome > 0 else "lose" if outcome < 0 else "draw",
            "your_hand": [card.to_dict() for card in me.hand],
            "opponent_hand": [card.to_dict() for card in other.hand],
            "your_evaluation": my_eval.to_dict(),
            "opponent_evaluation": other_eval.to_dict(),
        }


def compare_cards(room: Room, seat_idx: int, opponent_idx: int) -> DuelResult:
    """Force a showdown between the player on turn and one other player."""
    challenger = room.players[seat_idx]
    opponent = room.players[opponent_idx]
    if opponent_idx == seat_idx:
        raise GameError("INVALID_DUEL_TARGET", "Pick another player to compare with")
    if not challenger.in_hand or not opponent.in_hand:
        raise GameError("PLAYER_FOLDED", "One of the players has already folded")
    if room.current_round < 2:
        raise GameError("DUEL_TOO_EARLY", "Cards can only be compared from round 2")
    require_turn(room, seat_idx)
    if challenger.current_bet < charged_amount(challenger, room.min_bet):
        raise GameError("DUEL_STAKE_TOO_LOW", "Match the current bet before comparing cards")

    challenger_eval = evaluate_hand(challenger.hand)
    opponent_eval = evaluate_hand(opponent.hand)
    result = DuelResult(
        challenger=challenger,
        opponent=opponent,
        challenger_eval=challenger_eval,
        opponent_eval=opponent_eval,
        outcome=compare_hands(challenger_eval, opponent_eval),
    )
    if result.loser is not None:
        result.loser.status = PlayerStatus.FOLDED

    challenger.acted_this_round = True
    room.current_turn = next_active_seat(room, seat_idx)
    return result
