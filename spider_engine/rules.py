from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Iterator, NamedTuple, Optional

from spider_engine.cards import NUM_PER_SUIT, Rank, rank_value
from spider_engine.state import PILE_SIZE, TOTAL_RUNS, Column, GameState

logger = logging.getLogger(__name__)

MOVE_PENALTY = 1
RUN_BONUS = 100


class MalformedStockError(ValueError):
    pass


class DealBlocker(Enum):
    EMPTY_STOCK = "EMPTY_STOCK"
    EMPTY_COLUMN = "EMPTY_COLUMN"


class RunCheck(NamedTuple):
    found: bool
    start_index: int


NO_RUN = RunCheck(False, -1)


def is_valid_sequence(column: Column, start_index: int) -> bool:
    """
    :param column: cards from bottom (index 0) to top
    :param start_index: index of the first card of the sequence
    :return: True if every card from start_index up is face-up, of one suit and
        descending by exactly one rank
    """
    if start_index < 0 or start_index >= len(column):
        return False
    base = column[start_index]
    if not base.face_up:
        return False
    for i in range(start_index + 1, len(column)):
        upper = column[i]
        if not upper.face_up:
            return False
        if upper.suit != base.suit or rank_value(base.rank) - rank_value(upper.rank) != 1:
            return False
        base = upper
    return True


def movable_starts(column: Column) -> tuple[int, ...]:
    """Return all indices that start a movable same-suit descending sequence."""
    n = len(column)
    if n == 0 or not column[-1].face_up:
        return ()
    valid = [n - 1]
    for idx in range(n - 2, -1, -1):
        lower = column[idx]
        upper = column[idx + 1]
        if not lower.face_up:
            break
        if lower.suit != upper.suit or rank_value(lower.rank) != rank_value(upper.rank) + 1:
            break
        valid.append(idx)
    valid.reverse()
    return tuple(valid)


def can_move_cards(source: Column, start_index: int, target: Column) -> bool:
    if not is_valid_sequence(source, start_index):
        return False
    if len(target) == 0:
        return True
    target_top = target[-1]
    if not target_top.face_up:
        return False
    # Any suit may receive a sequence; only the rank has to fit.
    return rank_value(target_top.rank) == rank_value(source[start_index].rank) + 1


def _reveal_top(column: Column) -> Column:
    if len(column) == 0 or column[-1].face_up:
        return column
    return column[:-1] + (column[-1].flipped(True),)


def _valid_column_index(state: GameState, idx: int) -> bool:
    return 0 <= idx < len(state.columns)


def move_cards(state: GameState, source_col: int, start_index: int, target_col: int) -> GameState:
    """Move the sequence starting at start_index; returns `state` itself when the move is illegal."""
    if source_col == target_col:
        return state
    if not (_valid_column_index(state, source_col) and _valid_column_index(state, target_col)):
        logger.debug("rejected move %s:%s -> %s: no such column", source_col, start_index, target_col)
        return state
    source = state.columns[source_col]
    target = state.columns[target_col]
    if not can_move_cards(source, start_index, target):
        logger.debug("rejected move %s:%s -> %s", source_col, start_index, target_col)
        return state

    columns = list(state.columns)
    columns[source_col] = _reveal_top(source[:start_index])
    columns[target_col] = target + source[start_index:]

    moved = replace(
        state,
        columns=tuple(columns),
        moves=state.moves + 1,
        score=state.score - MOVE_PENALTY,
    )
    return remove_complete_runs(moved)


def check_complete_run(column: Column) -> RunCheck:
    if len(column) < NUM_PER_SUIT:
        return NO_RUN
    start = len(column) - NUM_PER_SUIT
    if column[start].rank != Rank.KING or column[-1].rank != Rank.ACE:
        return NO_RUN
    # A valid sequence K..A of length 13 is necessarily one suit with no gaps.
    if not is_valid_sequence(column, start):
        return NO_RUN
    return RunCheck(True, start)


def remove_complete_runs(state: GameState) -> GameState:
    """Single pass over every column; each completed run is taken off the tableau."""
    columns = list(state.columns)
    removed = 0
    for idx, column in enumerate(columns):
        found, start = check_complete_run(column)
        if not found:
            continue
        logger.debug("run of %s completed in column %d", column[-1].suit.value, idx)
        columns[idx] = _reveal_top(column[:start])
        removed += 1

    if removed == 0:
        return state
    return replace(
        state,
        columns=tuple(columns),
        completed_runs=state.completed_runs + removed,
        score=state.score + RUN_BONUS * removed,
    )


def deal_blocker(state: GameState) -> Optional[DealBlocker]:
    if not state.stock:
        return DealBlocker.EMPTY_STOCK
    if state.has_empty_column():
        return DealBlocker.EMPTY_COLUMN
    return None


def deal_from_stock(state: GameState) -> Optional[GameState]:
    """Deal the last stock pile, one face-up card per column. None if dealing is not allowed."""
    blocker = deal_blocker(state)
    if blocker is not None:
        logger.debug("rejected deal: %s", blocker.value)
        return None

    pile = state.stock[-1]
    if len(pile) != PILE_SIZE or len(pile) != len(state.columns):
        raise MalformedStockError(f"stock pile holds {len(pile)} cards, expected {PILE_SIZE}")

    columns = tuple(column + (card.flipped(True),) for column, card in zip(state.columns, pile))
    dealt = replace(
        state,
        columns=columns,
        stock=state.stock[:-1],
        moves=state.moves + 1,
    )
    return remove_complete_runs(dealt)


def is_game_won(state: GameState) -> bool:
    return state.completed_runs == TOTAL_RUNS


def legal_moves(state: GameState) -> Iterator[tuple[int, int, int]]:
    """Yield (source column, start index, target column) in ascending search order."""
    columns = state.columns
    for s_idx, source in enumerate(columns):
        for start in movable_starts(source):
            for t_idx, target in enumerate(columns):
                if t_idx == s_idx:
                    continue
                if can_move_cards(source, start, target):
                    yield s_idx, start, t_idx


def has_legal_move(state: GameState) -> bool:
    return next(legal_moves(state), None) is not None
