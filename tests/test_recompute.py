"""Unit tests for the recompute orchestrator."""

import contextlib
import io
import unittest

import bomb_grid
import compute_probabilities
import recompute
from bomb_grid import Mark, Player, Winner


def _orchestrator(
    side_length: int, bomb_count: int,
) -> tuple[recompute.RecomputeOrchestrator, recompute.RecordingDisplay]:
    """Helper: orchestrator with a recording display and a fresh game."""
    display = recompute.RecordingDisplay()
    orchestrator = recompute.RecomputeOrchestrator(display=display)
    orchestrator.new_game(side_length, bomb_count)
    return orchestrator, display


class TestNewGame(unittest.TestCase):

    def test_new_game_recomputes_immediately(self) -> None:
        orchestrator, display = _orchestrator(3, 3)
        self.assertEqual(orchestrator.recompute_count, 1)
        self.assertEqual(len(display.results), 1)
        self.assertFalse(orchestrator.pending)
        result = display.last
        self.assertTrue(result.validation.ok)
        self.assertAlmostEqual(result.probabilities.win_a, result.probabilities.win_b)

    def test_new_game_clamps_inputs(self) -> None:
        orchestrator, display = _orchestrator(2, 10)
        self.assertEqual(orchestrator.game.config, bomb_grid.GameConfig(2, 4))
        self.assertEqual(display.last.config.bomb_count, 4)

    def test_new_game_rebuilds_boards(self) -> None:
        orchestrator, _ = _orchestrator(2, 1)
        orchestrator.new_game(4, 2)
        self.assertEqual(len(orchestrator.game.board_a), 16)
        orchestrator.toggle_safe(Player.A, 15)
        result = orchestrator.tick()
        self.assertEqual(result.stats_a.picked, 1)
        self.assertEqual(result.stats_a.remaining, 15)

    def test_no_bombs_is_a_tie(self) -> None:
        """N=4, n=0: tie 100% regardless of marks, outcome fires once."""
        orchestrator, display = _orchestrator(2, 0)
        self.assertEqual(
            display.last.probabilities, compute_probabilities.WinProbabilities(0.0, 0.0, 1.0),
        )
        self.assertEqual(len(display.outcomes), 1)
        self.assertEqual(display.outcomes[0].winner, Winner.TIE)
        self.assertEqual(display.outcomes[0].reason, bomb_grid.OutcomeReason.NO_BOMBS)

        orchestrator.set_mark(Player.A, 0, Mark.SAFE)
        orchestrator.set_mark(Player.A, 1, Mark.SAFE)
        result = orchestrator.tick()
        self.assertEqual(result.probabilities.tie, 1.0)
        self.assertIsNone(result.outcome)
        self.assertEqual(len(display.outcomes), 1)


class TestCoalescing(unittest.TestCase):

    def test_burst_runs_one_recompute(self) -> None:
        orchestrator, display = _orchestrator(3, 3)
        orchestrator.toggle_safe(Player.A, 0)
        orchestrator.toggle_safe(Player.A, 1)
        orchestrator.toggle_bomb(Player.B, 4)
        self.assertTrue(orchestrator.pending)
        self.assertEqual(orchestrator.recompute_count, 1)

        result = orchestrator.tick()
        self.assertIsNotNone(result)
        self.assertEqual(orchestrator.recompute_count, 2)
        self.assertEqual(len(display.results), 2)
        self.assertFalse(orchestrator.pending)

    def test_tick_without_pending_is_noop(self) -> None:
        orchestrator, display = _orchestrator(3, 3)
        self.assertIsNone(orchestrator.tick())
        self.assertEqual(orchestrator.recompute_count, 1)
        self.assertEqual(len(display.results), 1)

    def test_latest_state_wins(self) -> None:
        orchestrator, _ = _orchestrator(3, 3)
        orchestrator.set_mark(Player.A, 0, Mark.BOMB)
        orchestrator.set_mark(Player.A, 0, Mark.SAFE)
        result = orchestrator.tick()
        self.assertEqual(result.stats_a.found, 0)
        self.assertEqual(result.stats_a.picked, 1)

    def test_forced_schedule_runs_now(self) -> None:
        orchestrator, _ = _orchestrator(3, 3)
        orchestrator.set_mark(Player.B, 2, Mark.SAFE)
        result = orchestrator.schedule(force=True)
        self.assertIsNotNone(result)
        self.assertFalse(orchestrator.pending)
        self.assertEqual(result.stats_b.picked, 1)
        self.assertIsNone(orchestrator.tick())


class TestValidationPublishing(unittest.TestCase):

    def test_error_blanks_probabilities(self) -> None:
        orchestrator, display = _orchestrator(2, 1)
        orchestrator.set_mark(Player.B, 0, Mark.BOMB)
        orchestrator.set_mark(Player.B, 1, Mark.BOMB)
        result = orchestrator.tick()
        self.assertEqual(
            result.validation.error, compute_probabilities.ErrorKind.FOUND_EXCEEDS_TARGET,
        )
        self.assertIsNone(result.probabilities)
        self.assertIs(display.last, result)

    def test_recovers_after_fix(self) -> None:
        orchestrator, _ = _orchestrator(2, 2)
        orchestrator.set_mark(Player.A, 0, Mark.SAFE)
        orchestrator.set_mark(Player.A, 1, Mark.SAFE)
        orchestrator.set_mark(Player.A, 2, Mark.SAFE)
        result = orchestrator.tick()
        self.assertEqual(
            result.validation.error,
            compute_probabilities.ErrorKind.INSUFFICIENT_REMAINING_CELLS,
        )
        self.assertIsNone(result.probabilities)

        orchestrator.toggle_safe(Player.A, 2)
        result = orchestrator.tick()
        self.assertTrue(result.validation.ok)
        self.assertAlmostEqual(result.probabilities.total, 1.0)

    def test_oversized_bomb_count(self) -> None:
        game = bomb_grid.GameState.create(bomb_grid.GameConfig(2, 5))
        display = recompute.RecordingDisplay()
        orchestrator = recompute.RecomputeOrchestrator(game=game, display=display)
        result = orchestrator.recompute_now()
        self.assertEqual(
            result.validation.error,
            compute_probabilities.ErrorKind.TARGET_COUNT_EXCEEDS_CELLS,
        )
        self.assertIsNone(result.probabilities)
        self.assertIsNone(result.outcome)

    def test_advisory_when_reveal_counts_differ(self) -> None:
        orchestrator, _ = _orchestrator(3, 3)
        orchestrator.toggle_safe(Player.A, 0)
        result = orchestrator.tick()
        self.assertTrue(result.validation.advisory)
        self.assertIsNotNone(result.probabilities)

        orchestrator.toggle_safe(Player.B, 0)
        result = orchestrator.tick()
        self.assertFalse(result.validation.advisory)


class TestOutcome(unittest.TestCase):

    def test_a_completes_first_b_wins(self) -> None:
        """N=4, n=4: A reaches 4 bombs while B has 2, so B wins."""
        orchestrator, display = _orchestrator(2, 4)
        orchestrator.set_mark(Player.B, 0, Mark.BOMB)
        orchestrator.set_mark(Player.B, 1, Mark.BOMB)
        self.assertIsNone(orchestrator.tick().outcome)

        for index in range(4):
            orchestrator.set_mark(Player.A, index, Mark.BOMB)
        result = orchestrator.tick()
        self.assertEqual(result.outcome.winner, Winner.B)
        self.assertEqual(result.outcome.reason, bomb_grid.OutcomeReason.A_COMPLETE)
        self.assertEqual(display.outcomes, [result.outcome])

    def test_outcome_fires_once(self) -> None:
        orchestrator, display = _orchestrator(2, 1)
        orchestrator.set_mark(Player.A, 0, Mark.BOMB)
        orchestrator.tick()
        orchestrator.set_mark(Player.B, 3, Mark.BOMB)
        result = orchestrator.tick()
        self.assertIsNone(result.outcome)
        self.assertEqual(len(display.outcomes), 1)
        self.assertEqual(display.outcomes[0].winner, Winner.B)

    def test_reset_rearms_outcome(self) -> None:
        orchestrator, display = _orchestrator(2, 1)
        orchestrator.set_mark(Player.B, 0, Mark.BOMB)
        orchestrator.tick()
        result = orchestrator.reset()
        self.assertEqual(result.stats_a.picked, 0)
        self.assertEqual(result.stats_b.picked, 0)
        self.assertIsNone(result.outcome)

        orchestrator.set_mark(Player.B, 1, Mark.BOMB)
        orchestrator.tick()
        self.assertEqual(len(display.outcomes), 2)
        self.assertEqual(display.outcomes[1].winner, Winner.A)

    def test_simultaneous_completion_is_tie(self) -> None:
        orchestrator, display = _orchestrator(2, 1)
        orchestrator.set_mark(Player.A, 0, Mark.BOMB)
        orchestrator.set_mark(Player.B, 0, Mark.BOMB)
        result = orchestrator.tick()
        self.assertEqual(result.outcome.winner, Winner.TIE)
        self.assertEqual(result.outcome.reason, bomb_grid.OutcomeReason.BOTH_COMPLETE)


class TestConsoleDisplay(unittest.TestCase):

    def test_prints_odds_and_outcome(self) -> None:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            orchestrator = recompute.RecomputeOrchestrator(
                display=recompute.ConsoleDisplay(),
            )
            orchestrator.new_game(2, 1)
            orchestrator.set_mark(Player.A, 0, Mark.BOMB)
            orchestrator.tick()
        text = buffer.getvalue()
        self.assertIn("A Wins:", text)
        self.assertIn("Marked 1/4 | Bombs hit 1/1 | Remaining 3", text)
        self.assertIn("B Wins", text)
        self.assertIn("A hit all bombs", text)
        self.assertIn(compute_probabilities.ASYNC_PICKS_NOTE, text)

    def test_prints_error_and_blank_odds(self) -> None:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            game = bomb_grid.GameState.create(bomb_grid.GameConfig(2, 5))
            orchestrator = recompute.RecomputeOrchestrator(
                game=game, display=recompute.ConsoleDisplay(),
            )
            orchestrator.recompute_now()
        text = buffer.getvalue()
        self.assertIn("Error: n cannot exceed a².", text)
        self.assertIn("—", text)


class TestDisplayBase(unittest.TestCase):

    def test_base_display_is_abstract(self) -> None:
        display = recompute.Display()
        with self.assertRaises(NotImplementedError):
            display.show_outcome(
                bomb_grid.GameOutcome(Winner.TIE, bomb_grid.OutcomeReason.NO_BOMBS),
            )


if __name__ == "__main__":
    unittest.main()
