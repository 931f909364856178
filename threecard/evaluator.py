from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Sequence

from .cards import RANKS, Card


class HandCategory(str, Enum):
    HIGH_CARD = "high-card"
    PAIR = "pair"
    STRAIGHT = "straight"
    FLUSH = "flush"
    STRAIGHT_FLUSH = "straight-flush"
    THREE_OF_A_KIND = "three-of-a-kind"


# Three of a kind outranks a straight flush in this game.
CATEGORY_RANK = {
    HandCategory.HIGH_CARD: 1,
    HandCategory.PAIR: 2,
    HandCategory.STRAIGHT: 3,
    HandCategory.FLUSH: 4,
    HandCategory.STRAIGHT_FLUSH: 5,
    HandCategory.THREE_OF_A_KIND: 6,
}


@dataclass(frozen=True)
class HandEvaluation:
    category: HandCategory
    value: int
    description: str

    @property
    def strength(self) -> tuple:
        return (CATEGORY_RANK[self.category], self.value)

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.category.value, "value": self.value, "description": self.description}


def evaluate_hand(cards: Sequence[Card]) -> HandEvaluation:
    """Score a three-card hand. Within a category a higher value wins."""
    if len(cards) != 3:
        raise ValueError("A hand holds exactly 3 cards")

    ordered = sorted(cards, key=lambda card: card.value, reverse=True)
    v0, v1, v2 = (card.value for card in ordered)
    r0, r1, r2 = (card.rank for card in ordered)
    same_suit = len({card.suit for card in ordered}) == 1
    straight_high = _straight_high(v0, v1, v2)

    if r0 == r1 == r2:
        return HandEvaluation(HandCategory.THREE_OF_A_KIND, v0 * 100, f"Three {r0}s")
    if same_suit and straight_high:
        return HandEvaluation(
            HandCategory.STRAIGHT_FLUSH, straight_high * 1000, f"Straight flush to {_rank_of(straight_high)}"
        )
    if same_suit:
        return HandEvaluation(HandCategory.FLUSH, v0 * 10000 + v1 * 100 + v2, f"Flush in {ordered[0].suit}")
    if straight_high:
        return HandEvaluation(HandCategory.STRAIGHT, straight_high * 100, f"Straight to {_rank_of(straight_high)}")
    if r0 == r1:
        return HandEvaluation(HandCategory.PAIR, v0 * 100 + v2, f"Pair of {r0}s")
    if r1 == r2:
        return HandEvaluation(HandCategory.PAIR, v1 * 100 + v0, f"Pair of {r1}s")
    return HandEvaluation(HandCategory.HIGH_CARD, v0 * 10000 + v1 * 100 + v2, f"{r0} high")


def compare_hands(a: HandEvaluation, b: HandEvaluation) -> int:
    if a.strength > b.strength:
        return 1
    if a.strength < b.strength:
        return -1
    return 0


def _straight_high(v0: int, v1: int, v2: int) -> int:
    if v0 - v1 == 1 and v1 - v2 == 1:
        return v0
    if (v0, v1, v2) == (14, 3, 2):  # A-2-3 plays low
        return 3
    return 0


def _rank_of(value: int) -> str:
    return RANKS[value - 2]
