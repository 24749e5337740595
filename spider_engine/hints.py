from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from spider_engine.rules import can_move_cards, movable_starts
from spider_engine.state import GameState

SAME_SUIT_TIER = 1
ANY_SUIT_TIER = 2


@dataclass(frozen=True, slots=True)
class HintMove:
    source_column: int
    card_index: int
    target_column: int
    tier: int


@dataclass(frozen=True, slots=True)
class Hint:
    """What to do next: kind is MOVE, DEAL or NO_MOVES; move is set only for MOVE."""

    kind: str
    move: Optional[HintMove] = None


def _search(state: GameState, tier: int) -> Optional[HintMove]:
    columns = state.columns
    for s_idx, source in enumerate(columns):
        for start in movable_starts(source):
            suit = source[start].suit
            for t_idx, target in enumerate(columns):
                # Empty targets are never hinted.
                if t_idx == s_idx or len(target) == 0:
                    continue
                if not can_move_cards(source, start, target):
                    continue
                if tier == SAME_SUIT_TIER and target[-1].suit != suit:
                    continue
                return HintMove(source_column=s_idx, card_index=start, target_column=t_idx, tier=tier)
    return None


def find_hint(state: GameState) -> Optional[HintMove]:
    """First same-suit move, else the first move onto any non-empty column."""
    hint = _search(state, SAME_SUIT_TIER)
    if hint is None:
        hint = _search(state, ANY_SUIT_TIER)
    return hint


def suggest(state: GameState) -> Hint:
    move = find_hint(state)
    if move is not None:
        return Hint(kind="MOVE", move=move)
    if state.stock:
        return Hint(kind="DEAL")
    return Hint(kind="NO_MOVES")
