from __future__ import annotations

from typing import Tuple

from .errors import GameError
from .evaluator import HandEvaluation, evaluate_hand
from .models import BetRecord, GamePhase, Player, PlayerStatus, Room
from .turns import next_active_seat

# Wagering rules. Every function validates first and mutates only once all
# checks pass, so a rejected intent leaves the room untouched.


def require_turn(room: Room, seat_idx: int) -> None:
    if room.phase != GamePhase.PLAYING:
        raise GameError("GAME_NOT_ACTIVE", "Game is not in progress")
    if room.current_turn != seat_idx:
        raise GameError("OUT_OF_TURN", "Not your turn")


def charged_amount(player: Player, declared: int) -> int:
    # Betting without looking at the cards costs half the declared amount.
    return declared if player.has_viewed_cards else declared // 2


def place_bet(room: Room, seat_idx: int, declared: int) -> BetRecord:
    player = room.players[seat_idx]
    if not player.in_hand:
        raise GameError("ALREADY_FOLDED", "You have already folded")
    require_turn(room, seat_idx)
    if declared < room.min_bet:
        raise GameError("BET_TOO_LOW", f"Minimum bet is {room.min_bet}")

    actual = charged_amount(player, declared)
    if player.money < actual:
        raise GameError("INSUFFICIENT_FUNDS", "Not enough money")

    player.money -= actual
    player.current_bet += actual
    room.pot += actual
    player.acted_this_round = True

    # The ratchet follows the declared amount, not what was charged.
    if declared > room.min_bet:
        room.min_bet = declared

    record = BetRecord(
        player_id=player.id,
        player_name=player.name,
        declared_amount=declared,
        actual_amount=actual,
        viewed_cards=player.has_viewed_cards,
    )
    room.bet_history.append(record)
    _pass_turn(room, seat_idx)
    return record


def all_in(room: Room, seat_idx: int) -> BetRecord:
    player = room.players[seat_idx]
    if not player.in_hand:
        raise GameError("ALREADY_FOLDED", "You have already folded")
    if player.status == PlayerStatus.ALL_IN:
        raise GameError("ALREADY_ALL_IN", "You are already all-in")
    require_turn(room, seat_idx)

    amount = player.money
    player.money = 0
    player.current_bet += amount
    room.pot += amount
    player.status = PlayerStatus.ALL_IN
    player.acted_this_round = True

    if amount > room.min_bet:
        room.min_bet = amount

    record = BetRecord(
        player_id=player.id,
        player_name=player.name,
        declared_amount=amount,
        actual_amount=amount,
        viewed_cards=player.has_viewed_cards,
        action="all-in",
    )
    room.bet_history.append(record)
    _pass_turn(room, seat_idx)
    return record


def fold(room: Room, seat_idx: int) -> None:
    player = room.players[seat_idx]
    if not player.in_hand:
        raise GameError("ALREADY_FOLDED", "You have already folded")
    require_turn(room, seat_idx)

    player.status = PlayerStatus.FOLDED
    player.acted_this_round = True
    _pass_turn(room, seat_idx)


def view_cards(room: Room, seat_idx: int) -> Tuple[Player, HandEvaluation]:
    player = room.players[seat_idx]
    if player.has_viewed_cards:
        raise GameError("ALREADY_VIEWED", "You have already viewed your cards")
    require_turn(room, seat_idx)

    player.has_viewed_cards = True
    return player, evaluate_hand(player.hand)


def _pass_turn(room: Room, seat_idx: int) -> None:
    room.current_turn = next_active_seat(room, seat_idx)
