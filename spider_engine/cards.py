from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Iterable, Optional

NUM_PER_SUIT = 13
TOTAL_CARDS = 104
DIFFICULTIES = (1, 2, 4)


class Suit(Enum):
    SPADES = "♠"
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"

    @property
    def is_red(self) -> bool:
        return self in (Suit.HEARTS, Suit.DIAMONDS)

    @property
    def color(self) -> str:
        # Display only; rules never look at colour.
        return "red" if self.is_red else "black"


class Rank(IntEnum):
    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    @property
    def label(self) -> str:
        return _RANK_LABELS[self.value - 1]


_RANK_LABELS = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")

SUITS_BY_DIFFICULTY = {
    1: (Suit.SPADES,),
    2: (Suit.SPADES, Suit.HEARTS),
    4: (Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS),
}


def rank_value(rank: Rank) -> int:
    return int(rank)


@dataclass(frozen=True, slots=True)
class Card:
    """A single card. Flipping produces a new value, never mutates."""

    id: str
    suit: Suit
    rank: Rank
    face_up: bool = False

    def flipped(self, face_up: bool = True) -> Card:
        if self.face_up == face_up:
            return self
        return replace(self, face_up=face_up)

    def short(self) -> str:
        if not self.face_up:
            return "---"
        return self.suit.value + self.rank.label

    def __str__(self):
        return self.short()


def suits_for(difficulty: int) -> tuple[Suit, ...]:
    try:
        return SUITS_BY_DIFFICULTY[int(difficulty)]
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"unsupported difficulty {difficulty!r}, expected one of {DIFFICULTIES}") from None


def build_deck(suits: Iterable[Suit], repeat: int = 0) -> list[Card]:
    """One face-down card per (suit, rank); ids carry the repeat number so copies stay distinct."""
    deck = []
    idx = 0
    for suit in suits:
        for rank in Rank:
            deck.append(Card(id=f"card-{repeat}-{idx}-{suit.value}-{rank.label}", suit=suit, rank=rank))
            idx += 1
    return deck


def build_pack(difficulty: int) -> list[Card]:
    suits = suits_for(difficulty)
    repeats = 8 // len(suits)
    pack = []
    for i in range(repeats):
        pack.extend(build_deck(suits, repeat=i))
    return pack


def shuffle(cards: Iterable[Card], rng: Optional[random.Random] = None) -> tuple[Card, ...]:
    lst = list(cards)
    shuffle_rng = rng if rng is not None else random
    shuffle_rng.shuffle(lst)
    return tuple(lst)
