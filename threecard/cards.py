from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

RANKS = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
SUITS = ("hearts", "diamonds", "clubs", "spades")

RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS, start=2)}
SUIT_SYMBOL = {"hearts": "♥", "diamonds": "♦", "clubs": "♣", "spades": "♠"}
SUIT_LETTER = {"h": "hearts", "d": "diamonds", "c": "clubs", "s": "spades"}


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANK_VALUE:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUIT_SYMBOL:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def value(self) -> int:
        return RANK_VALUE[self.rank]

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOL[self.suit]

    @property
    def label(self) -> str:
        return f"{self.rank}{self.symbol}"

    def to_dict(self) -> Dict[str, object]:
        return {"rank": self.rank, "suit": self.suit, "value": self.value, "symbol": self.symbol}


def build_deck() -> List[Card]:
    return [Card(rank, suit) for suit in SUITS for rank in RANKS]


def shuffle_deck(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Shuffle in place (Fisher-Yates) and hand the same list back."""
    (rng or random.Random()).shuffle(deck)
    return deck


def deal(deck: List[Card], count: int) -> List[Card]:
    if len(deck) < count:
        raise ValueError("Not enough cards left in deck")
    return [deck.pop() for _ in range(count)]


def cards_to_dicts(cards: Sequence[Card]) -> List[Dict[str, object]]:
    return [card.to_dict() for card in cards]


def parse_label(label: str) -> Card:
    # Short form used by tests and tooling: "Ah", "10s", "3d".
    if len(label) not in (2, 3):
        raise ValueError(f"Invalid card label: {label}")
    rank, letter = label[:-1].upper(), label[-1].lower()
    if letter not in SUIT_LETTER:
        raise ValueError(f"Invalid suit: {letter}")
    return Card(rank, SUIT_LETTER[letter])


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
