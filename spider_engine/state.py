from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from spider_engine.cards import DIFFICULTIES, NUM_PER_SUIT, TOTAL_CARDS, Card, build_pack, shuffle, suits_for

logger = logging.getLogger(__name__)

Column = tuple[Card, ...]
Pile = tuple[Card, ...]
Stock = tuple[Pile, ...]

COLUMN_COUNT = 10
PILE_SIZE = 10
TOTAL_RUNS = TOTAL_CARDS // NUM_PER_SUIT
INITIAL_SCORE = 500
# Columns 0..3 start with 6 cards, the rest with 5.
LONG_COLUMNS = 4
LONG_COLUMN_SIZE = 6
SHORT_COLUMN_SIZE = 5


class InvariantError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class GameState:
    """Immutable game state. Transitions build new values with dataclasses.replace."""

    columns: tuple[Column, ...]
    stock: Stock
    completed_runs: int = 0
    score: int = INITIAL_SCORE
    moves: int = 0
    difficulty: int = 1

    def card_count(self) -> int:
        return sum(len(col) for col in self.columns) + sum(len(pile) for pile in self.stock)

    def has_empty_column(self) -> bool:
        return any(len(col) == 0 for col in self.columns)


def deal_layout(cards) -> tuple[tuple[Column, ...], Stock]:
    """Split a shuffled pack into the opening tableau and the stock piles."""
    cards = tuple(cards)
    if len(cards) != TOTAL_CARDS:
        raise ValueError(f"expected {TOTAL_CARDS} cards, got {len(cards)}")

    columns = []
    pos = 0
    for col in range(COLUMN_COUNT):
        size = LONG_COLUMN_SIZE if col < LONG_COLUMNS else SHORT_COLUMN_SIZE
        dealt = list(cards[pos:pos + size])
        pos += size
        dealt[-1] = dealt[-1].flipped(True)
        columns.append(tuple(dealt))

    stock = []
    while pos < len(cards):
        stock.append(tuple(card.flipped(False) for card in cards[pos:pos + PILE_SIZE]))
        pos += PILE_SIZE
    return tuple(columns), tuple(stock)


def create_game(difficulty: int, rng: Optional[random.Random] = None) -> GameState:
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"unsupported difficulty {difficulty!r}, expected one of {DIFFICULTIES}")
    columns, stock = deal_layout(shuffle(build_pack(difficulty), rng))
    logger.debug("new game: %d suit(s), %d stock piles", difficulty, len(stock))
    return GameState(
        columns=columns,
        stock=stock,
        completed_runs=0,
        score=INITIAL_SCORE,
        moves=0,
        difficulty=difficulty,
    )


def _face_up_contiguous(column: Column) -> bool:
    seen_face_up = False
    for card in column:
        if card.face_up:
            seen_face_up = True
        elif seen_face_up:
            return False
    return True


def invariant_violations(state: GameState) -> list[str]:
    problems = []

    if len(state.columns) != COLUMN_COUNT:
        problems.append(f"expected {COLUMN_COUNT} columns, got {len(state.columns)}")

    total = state.card_count() + NUM_PER_SUIT * state.completed_runs
    if total != TOTAL_CARDS:
        problems.append(f"card count is {total}, expected {TOTAL_CARDS}")

    for idx, column in enumerate(state.columns):
        if not _face_up_contiguous(column):
            problems.append(f"column {idx} has a face-down card above a face-up card")

    if not 0 <= state.completed_runs <= TOTAL_RUNS:
        problems.append(f"completed runs {state.completed_runs} out of range")
    cleared = not state.stock and all(len(col) == 0 for col in state.columns)
    if (state.completed_runs == TOTAL_RUNS) != cleared:
        problems.append("completed runs disagree with an empty board")

    for idx, pile in enumerate(state.stock):
        if not 1 <= len(pile) <= PILE_SIZE:
            problems.append(f"stock pile {idx} holds {len(pile)} cards")

    ids = Counter(card.id for column in state.columns for card in column)
    ids.update(card.id for pile in state.stock for card in pile)
    duplicates = sorted(card_id for card_id, n in ids.items() if n > 1)
    if duplicates:
        problems.append(f"duplicate card ids: {', '.join(duplicates)}")

    if state.difficulty not in DIFFICULTIES:
        problems.append(f"unsupported difficulty {state.difficulty}")
    else:
        allowed = set(suits_for(state.difficulty))
        strays = {card.suit for column in state.columns for card in column} - allowed
        strays |= {card.suit for pile in state.stock for card in pile} - allowed
        if strays:
            problems.append(f"suits outside the configured set: {sorted(s.value for s in strays)}")

    return problems


def check_invariants(state: GameState) -> None:
    problems = invariant_violations(state)
    if problems:
        raise InvariantError("; ".join(problems))
