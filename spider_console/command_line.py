import argparse
import logging
import random
from typing import Optional

from spider_console.settings_store import load_settings, save_settings, settings_seed, settings_suit_count
from spider_engine.cards import DIFFICULTIES
from spider_engine.hints import SAME_SUIT_TIER, Hint, suggest
from spider_engine.rules import (
    DealBlocker,
    can_move_cards,
    deal_blocker,
    deal_from_stock,
    has_legal_move,
    is_game_won,
    movable_starts,
    move_cards,
)
from spider_engine.state import TOTAL_RUNS, GameState, create_game

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Commands:\n"
    "  mv <src> <dst> [row]  move the sequence starting at row (default: longest legal one)\n"
    "  deal                  deal one card onto every column\n"
    "  hint                  suggest a move\n"
    "  new [suits]           start a new game with 1, 2 or 4 suits\n"
    "  help                  show this text\n"
    "  quit                  leave the game"
)


def render_state(state: GameState) -> str:
    lines = [
        f"Suits: {state.difficulty}    Score: {state.score}    Moves: {state.moves}    "
        f"Runs: {state.completed_runs}/{TOTAL_RUNS}    Stock: {len(state.stock)}",
        "   " + "".join(f"{i:^5}" for i in range(len(state.columns))),
    ]
    i = 0
    while True:
        has = False
        line = f"{i:>2} "
        for column in state.columns:
            if len(column) <= i:
                line += "     "
                continue
            has = True
            line += f"{column[i].short():^5}"
        if not has:
            break
        lines.append(line.rstrip())
        i += 1
    return "\n".join(lines)


def hint_message(hint: Hint) -> str:
    if hint.kind == "MOVE":
        move = hint.move
        if move.tier == SAME_SUIT_TIER:
            return (
                f"Move column {move.source_column} row {move.card_index} "
                f"to column {move.target_column} (same suit!)"
            )
        return f"Try moving column {move.source_column} row {move.card_index} to column {move.target_column}"
    if hint.kind == "DEAL":
        return "No useful moves found. Try dealing from stock!"
    return "No moves available!"


def deal_message(blocker: DealBlocker) -> str:
    if blocker == DealBlocker.EMPTY_STOCK:
        return "No more cards to deal!"
    return "Fill all empty columns before dealing!"


def default_start(state: GameState, src: int, dest: int) -> Optional[int]:
    """Start row of the longest sequence in src that may land on dest, or None."""
    source = state.columns[src]
    target = state.columns[dest]
    for start in movable_starts(source):
        if can_move_cards(source, start, target):
            return start
    return None


class ConsoleGame:
    """Holds the current state and turns text commands into engine calls."""

    def __init__(self, difficulty: int, rng: Optional[random.Random] = None):
        self.rng = rng
        self.state = create_game(difficulty, rng)
        self.ended = False

    def handle(self, command: str) -> str:
        parts = command.strip().split()
        if not parts:
            return ""
        verb = parts[0].lower()
        if verb == "mv":
            return self._move(parts[1:])
        if verb == "deal":
            return self._deal()
        if verb == "hint":
            return hint_message(suggest(self.state))
        if verb == "new":
            return self._new(parts[1:])
        if verb == "help":
            return HELP_TEXT
        if verb in ("quit", "exit", "q"):
            self.ended = True
            return "Bye!"
        return "Invalid command!"

    def _move(self, args) -> str:
        try:
            src = int(args[0])
            dest = int(args[1])
            if not (0 <= src < len(self.state.columns) and 0 <= dest < len(self.state.columns)):
                raise IndexError(src, dest)
            start = int(args[2]) if len(args) > 2 else default_start(self.state, src, dest)
        except (ValueError, IndexError):
            return "Invalid index!"
        if start is None:
            return "Cannot move!"
        new_state = move_cards(self.state, src, start, dest)
        if new_state is self.state:
            return "Cannot move!"
        runs_before = self.state.completed_runs
        self.state = new_state
        return self._after_change(runs_before)

    def _deal(self) -> str:
        blocker = deal_blocker(self.state)
        if blocker is not None:
            return deal_message(blocker)
        runs_before = self.state.completed_runs
        self.state = deal_from_stock(self.state)
        return self._after_change(runs_before)

    def _new(self, args) -> str:
        difficulty = self.state.difficulty
        if args:
            try:
                difficulty = int(args[0])
            except ValueError:
                return "Invalid suit count!"
            if difficulty not in DIFFICULTIES:
                return "Invalid suit count!"
            if difficulty != self.state.difficulty:
                settings = load_settings()
                settings["suit_count"] = str(difficulty)
                save_settings(settings)
        self.state = create_game(difficulty, self.rng)
        return "Game started!"

    def _after_change(self, runs_before: int) -> str:
        messages = []
        if self.state.completed_runs > runs_before:
            messages.append("Run completed!")
        if is_game_won(self.state):
            self.ended = True
            messages.append("You win!")
        elif not self.state.stock and not has_legal_move(self.state):
            messages.append("No moves available!")
        return " ".join(messages)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Spider patience in the terminal.")
    parser.add_argument("--suits", type=int, choices=DIFFICULTIES, default=None, help="Suit count.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible deal.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine decisions.")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    settings = load_settings()
    suits = args.suits if args.suits is not None else settings_suit_count(settings)
    seed = args.seed if args.seed is not None else settings_seed(settings)
    rng = random.Random(seed) if seed is not None else None
    logger.info("starting console game with %d suit(s), seed=%s", suits, seed)

    game = ConsoleGame(suits, rng)
    print("Game started!")
    print(HELP_TEXT)
    while not game.ended:
        print(render_state(game.state))
        try:
            command = input("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        message = game.handle(command)
        if message:
            print(message)
    if is_game_won(game.state):
        print(render_state(game.state))


if __name__ == '__main__':
    main()
