import itertools
import random
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from spider_console import settings_store
from spider_console.command_line import ConsoleGame, default_start, hint_message, main, render_state
from spider_engine.cards import Card, Rank, Suit
from spider_engine.hints import Hint, HintMove
from spider_engine.state import GameState

_ids = itertools.count()

S, H = Suit.SPADES, Suit.HEARTS


def visible(suit, rank):
    return Card(id=f"c{next(_ids)}", suit=suit, rank=Rank(rank), face_up=True)


def make_state(columns, stock=(), completed_runs=0):
    cols = [tuple(c) for c in columns]
    cols.extend(() for _ in range(10 - len(cols)))
    return GameState(
        columns=tuple(cols),
        stock=tuple(tuple(p) for p in stock),
        completed_runs=completed_runs,
        difficulty=2,
    )


class SettingsStoreTestCase(unittest.TestCase):
    def test_missing_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as td:
            with patch.object(settings_store, "SETTINGS_PATH", Path(td) / "settings.ini"):
                data = settings_store.load_settings()
        self.assertEqual(settings_store.DEFAULT_SETTINGS, data)

    def test_save_then_load(self):
        with tempfile.TemporaryDirectory() as td:
            ini_path = Path(td) / "settings.ini"
            with patch.object(settings_store, "SETTINGS_PATH", ini_path):
                settings_store.save_settings({"suit_count": "4", "seed": "42"})
                data = settings_store.load_settings()
            text = ini_path.read_text(encoding="utf-8")
        self.assertIn("[console]", text)
        self.assertEqual(4, settings_store.settings_suit_count(data))
        self.assertEqual(42, settings_store.settings_seed(data))

    def test_bad_values_are_sanitized(self):
        with tempfile.TemporaryDirectory() as td:
            ini_path = Path(td) / "settings.ini"
            ini_path.write_text("[console]\nsuit_count = 3\nseed = abc\n", encoding="utf-8")
            with patch.object(settings_store, "SETTINGS_PATH", ini_path):
                data = settings_store.load_settings()
        self.assertEqual("1", data["suit_count"])
        self.assertIsNone(settings_store.settings_seed(data))


class ConsoleGameTestCase(unittest.TestCase):
    def make_game(self, state=None):
        game = ConsoleGame(2, random.Random(20260210))
        if state is not None:
            game.state = state
        return game

    def test_render_shows_every_column(self):
        game = self.make_game()
        text = render_state(game.state)
        self.assertIn("Score: 500", text)
        self.assertIn("Stock: 5", text)
        self.assertIn("---", text)
        # header plus six rows for the tallest columns
        self.assertEqual(8, len(text.splitlines()))

    def test_move_command(self):
        game = self.make_game(make_state([[visible(S, 9), visible(S, 8)], [visible(H, 10)]]))
        self.assertEqual("", game.handle("mv 0 1"))
        self.assertEqual((), game.state.columns[0])
        self.assertEqual(3, len(game.state.columns[1]))

    def test_move_with_explicit_row(self):
        game = self.make_game(make_state([[visible(S, 9), visible(S, 8)], [visible(H, 9)]]))
        self.assertEqual("", game.handle("mv 0 1 1"))
        self.assertEqual(1, len(game.state.columns[0]))

    def test_bad_moves_are_reported(self):
        state = make_state([[visible(S, 9)], [visible(H, 3)]])
        game = self.make_game(state)
        self.assertEqual("Cannot move!", game.handle("mv 0 1"))
        self.assertEqual("Invalid index!", game.handle("mv 0"))
        self.assertEqual("Invalid index!", game.handle("mv x 1"))
        self.assertEqual("Invalid index!", game.handle("mv 0 10"))
        self.assertIs(state, game.state)

    def test_default_start_picks_longest_legal_sequence(self):
        state = make_state([[visible(S, 9), visible(S, 8), visible(S, 7)], [visible(H, 9)], []])
        self.assertEqual(1, default_start(state, 0, 1))
        self.assertEqual(0, default_start(state, 0, 2))
        self.assertIsNone(default_start(state, 1, 0))

    def test_deal_messages(self):
        game = self.make_game(make_state([[visible(S, 9)]], stock=[[visible(S, 1)] * 10]))
        self.assertEqual("Fill all empty columns before dealing!", game.handle("deal"))
        game.state = make_state([[visible(S, 9)] for _ in range(10)])
        self.assertEqual("No more cards to deal!", game.handle("deal"))

    def test_deal_command(self):
        game = self.make_game()
        game.handle("deal")
        self.assertEqual(4, len(game.state.stock))
        self.assertEqual(1, game.state.moves)

    def test_winning_move_ends_the_game(self):
        run = [visible(S, r) for r in range(13, 1, -1)]
        game = self.make_game(make_state([run, [visible(S, 1)]], completed_runs=7))
        self.assertEqual("Run completed! You win!", game.handle("mv 1 0"))
        self.assertTrue(game.ended)

    def test_hint_and_misc_commands(self):
        game = self.make_game(make_state([[visible(H, 8)], [visible(S, 8)], [visible(S, 7)]]))
        self.assertEqual("Move column 2 row 0 to column 1 (same suit!)", game.handle("hint"))
        self.assertEqual("Invalid command!", game.handle("fly"))
        with tempfile.TemporaryDirectory() as td:
            with patch.object(settings_store, "SETTINGS_PATH", Path(td) / "settings.ini"):
                self.assertEqual("Invalid suit count!", game.handle("new 3"))
                self.assertEqual("Game started!", game.handle("new 4"))
        self.assertEqual(4, game.state.difficulty)
        self.assertEqual("Bye!", game.handle("quit"))
        self.assertTrue(game.ended)

    def test_new_game_with_other_suit_count_is_remembered(self):
        game = self.make_game()
        with tempfile.TemporaryDirectory() as td:
            ini_path = Path(td) / "settings.ini"
            with patch.object(settings_store, "SETTINGS_PATH", ini_path):
                settings_store.save_settings({"suit_count": "2", "seed": "99"})
                self.assertEqual("Game started!", game.handle("new 1"))
                data = settings_store.load_settings()
        self.assertEqual(1, game.state.difficulty)
        self.assertEqual(1, settings_store.settings_suit_count(data))
        self.assertEqual(99, settings_store.settings_seed(data))

    def test_new_game_with_same_suit_count_writes_nothing(self):
        game = self.make_game()
        with tempfile.TemporaryDirectory() as td:
            ini_path = Path(td) / "settings.ini"
            with patch.object(settings_store, "SETTINGS_PATH", ini_path):
                game.handle("new 2")
                game.handle("new")
            self.assertFalse(ini_path.exists())

    def test_hint_messages(self):
        self.assertEqual("Try moving column 1 row 3 to column 0", hint_message(Hint("MOVE", HintMove(1, 3, 0, 2))))
        self.assertEqual("No useful moves found. Try dealing from stock!", hint_message(Hint("DEAL")))
        self.assertEqual("No moves available!", hint_message(Hint("NO_MOVES")))

    def test_main_quits_on_command(self):
        with tempfile.TemporaryDirectory() as td:
            with patch.object(settings_store, "SETTINGS_PATH", Path(td) / "settings.ini"), \
                    patch("builtins.input", side_effect=["hint", "quit"]), \
                    patch("builtins.print") as fake_print:
                main(["--suits", "1", "--seed", "3"])
        printed = [call.args[0] for call in fake_print.call_args_list if call.args]
        self.assertEqual("Game started!", printed[0])
        self.assertIn("Bye!", printed)


if __name__ == "__main__":
    unittest.main()
