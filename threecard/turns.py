from __future__ import annotations

from typing import Callable, Optional

from .models import Player, Room

# Turn order is computed from room state alone; nothing here mutates.


def next_active_seat(room: Room, from_seat: int) -> Optional[int]:
    """First seat after ``from_seat`` whose player can still wager, or None."""
    return _scan(room, from_seat, lambda player: player.can_act)


def first_seat_after_dealer(room: Room) -> Optional[int]:
    if room.dealer_index is None:
        return None
    return _scan(room, room.dealer_index, lambda player: player.is_contender)


def _scan(room: Room, start: int, eligible: Callable[[Player], bool]) -> Optional[int]:
    seats = len(room.players)
    if seats == 0:
        return None
    idx = (start + 1) % seats
    for _ in range(seats):
        if eligible(room.players[idx]):
            return idx
        idx = (idx + 1) % seats
    return None
