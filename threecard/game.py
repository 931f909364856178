from __future__ import annotations

import logging
import random
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from . import betting, duel
from .cards import cards_to_dicts
from .errors import GameError
from .hand import HandResult, advance_round, is_hand_finished, is_round_complete, resolve_hand, start_new_hand
from .models import Event, GamePhase, Player, PlayerStatus, Room, RoomConfig
from .tournament import TournamentResult, conclude, is_tournament_over, prune_roster
from .turns import next_active_seat

LOGGER = logging.getLogger("three_card_engine")

MAX_AMOUNT_DIGITS = 18

# GameEngine owns one room. It validates intents, applies them through the
# rule modules and returns the events the host should deliver. No networking
# or timers live here.


class GameEngine:
    """Three-card tournament engine for a single room."""

    def __init__(self, code: str, host_id: str, config: RoomConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.room = Room(code=code, host=host_id, min_bet=config.ante)
        self.rng = rng or random.Random()
        self.awaiting_next_hand = False
        self.closed = False

    # Seat management -------------------------------------------------

    def add_player(self, player_id: str, name: str) -> Player:
        display = name.strip() if isinstance(name, str) else ""
        if not display:
            raise GameError("NAME_REQUIRED", "A player name is required")
        room = self.room
        if room.phase != GamePhase.WAITING:
            raise GameError("GAME_ALREADY_STARTED", "The game has already started")
        if len(room.players) >= self.config.max_players:
            raise GameError("ROOM_FULL", "Room is full")
        key = display.casefold()
        if any(player.name.casefold() == key for player in room.players):
            raise GameError("NAME_TAKEN", "That name is already taken")

        player = Player(id=player_id, name=display, money=self.config.starting_money, position=len(room.players))
        room.players.append(player)
        return player

    def _seat(self, player_id: str) -> int:
        seat_idx = self.room.seat_of(player_id)
        if seat_idx is None:
            raise GameError("PLAYER_NOT_FOUND", "Player not found in this room")
        return seat_idx

    # Intents ---------------------------------------------------------

    def start_game(self, player_id: str) -> List[Event]:
        room = self.room
        self._seat(player_id)
        if room.host != player_id:
            raise GameError("NOT_HOST", "Only the host can start the game")
        if room.phase != GamePhase.WAITING:
            raise GameError("GAME_ALREADY_STARTED", "The game has already started")
        if len(room.players) < self.config.min_players:
            raise GameError("NOT_ENOUGH_PLAYERS", f"At least {self.config.min_players} players are needed")

        room.phase = GamePhase.PLAYING
        room.tournament_players = [player.id for player in room.players]
        room.starting_player_count = len(room.players)
        room.hand_limit = self.config.hand_cap or room.starting_player_count
        room.hands_played = 0
        LOGGER.info("Game started room=%s players=%s", room.code, room.starting_player_count)
        return self._begin_hand("game-started")

    def view_cards(self, player_id: str) -> List[Event]:
        seat_idx = self._seat(player_id)
        player, evaluation = betting.view_cards(self.room, seat_idx)
        return [
            self._private(player.id, "cards-revealed", {
                "cards": cards_to_dicts(player.hand),
                "hand_evaluation": evaluation.to_dict(),
            }),
            self._notify(player, "view-cards", f"{player.name} looked at their cards"),
            self.room_updated(),
        ]

    def place_bet(self, player_id: str, amount: object) -> List[Event]:
        seat_idx = self._seat(player_id)
        declared = _parse_amount(amount)
        record = betting.place_bet(self.room, seat_idx, declared)
        player = self.room.players[seat_idx]
        message = f"{player.name} bets {record.declared_amount}"
        if not record.viewed_cards:
            message += f" (pays {record.actual_amount} blind)"
        events = [
            self._notify(
                player,
                "bet",
                message,
                declared_amount=record.declared_amount,
                actual_amount=record.actual_amount,
            )
        ]
        return self._after_action(events)

    def fold(self, player_id: str) -> List[Event]:
        seat_idx = self._seat(player_id)
        betting.fold(self.room, seat_idx)
        player = self.room.players[seat_idx]
        return self._after_action([self._notify(player, "fold", f"{player.name} folds")])

    def all_in(self, player_id: str) -> List[Event]:
        seat_idx = self._seat(player_id)
        record = betting.all_in(self.room, seat_idx)
        player = self.room.players[seat_idx]
        events = [
            self._notify(player, "all-in", f"{player.name} goes all-in for {record.actual_amount}", amount=record.actual_amount)
        ]
        return self._after_action(events)

    def compare_cards(self, player_id: str, target_id: str) -> List[Event]:
        seat_idx = self._seat(player_id)
        target_idx = self._seat(target_id)
        result = duel.compare_cards(self.room, seat_idx, target_idx)
        challenger, opponent = result.challenger, result.opponent
        events = [self._private(challenger.id, "compare-result", result.view_for(challenger.id))]
        if opponent.connected:
            events.append(self._private(opponent.id, "compare-result", result.view_for(opponent.id)))
        events.append(
            self._notify(
                challenger,
                "compare",
                f"{challenger.name} compared cards with {opponent.name}",
                target_player_id=opponent.id,
                target_player_name=opponent.name,
            )
        )
        return self._after_action(events)

    def disconnect(self, player_id: str) -> List[Event]:
        room = self.room
        seat_idx = self._seat(player_id)
        player = room.players[seat_idx]
        player.connected = False

        if room.phase == GamePhase.WAITING:
            if player_id == room.host:
                self.closed = True
                LOGGER.info("Host left room %s before the game started; closing", room.code)
                return [
                    Event("room-closed", {"room_code": room.code, "message": "The host left, room closed"}, room.connected_ids())
                ]
            # The seat and its position stay; the player sits out once dealt in.
            return [self._disconnected(player), self.room_updated()]

        if room.phase == GamePhase.PLAYING and room.current_turn is not None and player.in_hand:
            # Leaving mid-hand counts as a fold.
            player.status = PlayerStatus.FOLDED
            player.acted_this_round = True
            if room.current_turn == seat_idx:
                room.current_turn = next_active_seat(room, seat_idx)
            return self._after_action([self._disconnected(player)])
        return [self._disconnected(player)]

    def start_next_hand(self) -> List[Event]:
        """Timer callback. Re-checks the tournament state before dealing."""
        room = self.room
        if not self.awaiting_next_hand or room.phase != GamePhase.PLAYING:
            return []
        self.awaiting_next_hand = False
        if is_tournament_over(room):
            return [self._tournament_ended(conclude(room))]
        return self._begin_hand("new-hand-started")

    # Hand flow -------------------------------------------------------

    def _begin_hand(self, ev: str) -> List[Event]:
        start_new_hand(self.room, self.config, self.rng)
        events = [self._broadcast(ev, self.room_state())]
        # Antes can leave nobody able to act; settle straight away then.
        if is_hand_finished(self.room):
            events.extend(self._finish_hand())
        return events

    def _after_action(self, events: List[Event]) -> List[Event]:
        room = self.room
        if is_round_complete(room):
            advance_round(room)
        events.append(self.room_updated())
        if is_hand_finished(room):
            events.extend(self._finish_hand())
        return events

    def _finish_hand(self) -> List[Event]:
        room = self.room
        result = resolve_hand(room)
        events = [self._broadcast("hand-ended", self._hand_payload(result))]
        prune_roster(room)
        if is_tournament_over(room):
            events.append(self._tournament_ended(conclude(room)))
        else:
            self.awaiting_next_hand = True
        return events

    # Payloads --------------------------------------------------------

    def room_state(self) -> Dict[str, object]:
        room = self.room
        return {
            "code": room.code,
            "host": room.host,
            "phase": room.phase.value,
            "current_round": room.current_round,
            "dealer_index": room.dealer_index,
            "pot": room.pot,
            "min_bet": room.min_bet,
            "current_turn": room.current_turn,
            "hands_played": room.hands_played,
            "starting_player_count": room.starting_player_count,
            "hand_limit": room.hand_limit,
            "tournament_players": list(room.tournament_players),
            "bet_history": [record.to_dict() for record in room.bet_history],
            "players": [player.public_state() for player in room.players],
            "settings": asdict(self.config),
            "created_at": room.created_at,
        }

    def _hand_payload(self, result: HandResult) -> Dict[str, object]:
        winner = result.winner
        return {
            "winner": winner.public_state() if winner else None,
            "winners": [player.id for player in result.winners],
            "pot": result.pot,
            "share": result.share,
            "eliminated": [player.id for player in result.eliminated],
            "showdown": [
                {
                    "player_id": player_id,
                    "cards": cards_to_dicts(self.room.find_player(player_id).hand),
                    "evaluation": evaluation.to_dict(),
                }
                for player_id, evaluation in result.evaluations.items()
            ],
            "room": self.room_state(),
        }

    def _tournament_ended(self, result: TournamentResult) -> Event:
        champion = result.champion
        return self._broadcast(
            "tournament-ended",
            {
                "winner": champion.public_state() if champion else None,
                "rankings": [player.public_state() for player in result.rankings],
            },
        )

    def room_updated(self) -> Event:
        return self._broadcast("room-updated", self.room_state())

    def _disconnected(self, player: Player) -> Event:
        return self._broadcast(
            "player-disconnected",
            {"player_id": player.id, "player_name": player.name, "room": self.room_state()},
        )

    def _notify(self, player: Player, action: str, message: str, **extra: object) -> Event:
        data: Dict[str, object] = {
            "player_id": player.id,
            "player_name": player.name,
            "action": action,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        data.update(extra)
        return self._broadcast("player-action-notification", data)

    def _broadcast(self, ev: str, data: Dict[str, object]) -> Event:
        return Event(ev, data, self.room.connected_ids())

    def _private(self, player_id: str, ev: str, data: Dict[str, object]) -> Event:
        return Event(ev, data, (player_id,))


def _parse_amount(amount: object) -> int:
    if isinstance(amount, bool):
        raise GameError("BAD_AMOUNT", "Bet amount must be a whole number")
    if isinstance(amount, int):
        return amount
    if isinstance(amount, str):
        text = amount.strip()
        # ASCII digits only; str.isdigit() also accepts characters int() cannot parse.
        if text.isascii() and text.isdecimal() and len(text) <= MAX_AMOUNT_DIGITS:
            return int(text)
    raise GameError("BAD_AMOUNT", "Bet amount must be a whole number")
