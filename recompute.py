"""Recompute orchestration for live Bomb Grid odds.

Wires board mutation commands to the probability engine and publishes
each result to a display collaborator. Bursts of mutations are
coalesced: while a recompute is pending, further mutations do not
queue another one, and the pending run reads the latest state when the
scheduler ticks.
"""

from __future__ import annotations

import dataclasses

import bomb_grid
import compute_probabilities

_C = bomb_grid._Colors


# =============================================================================
# Published Result
# =============================================================================

@dataclasses.dataclass(frozen=True)
class RecomputeResult:
    """Everything published after one recompute.

    Attributes:
        config: Configuration the result was computed for.
        stats_a: Player A's board statistics.
        stats_b: Player B's board statistics.
        validation: Validation gate result (error and advisory flag).
        probabilities: The probability triple, or None when validation
            failed (blanked, never stale).
        outcome: The end-of-game outcome if it fired during this
            recompute, else None.
    """
    config: bomb_grid.GameConfig
    stats_a: bomb_grid.BoardStats
    stats_b: bomb_grid.BoardStats
    validation: compute_probabilities.ValidationResult
    probabilities: compute_probabilities.WinProbabilities | None
    outcome: bomb_grid.GameOutcome | None = None


# =============================================================================
# Display Collaborators
# =============================================================================

class Display:
    """Receiver for published results. Subclasses decide how to present."""

    def show_result(self, result: RecomputeResult) -> None:
        """Present the latest stats, warning, advisory and odds."""
        raise NotImplementedError

    def show_outcome(self, outcome: bomb_grid.GameOutcome) -> None:
        """Present the one-shot end-of-game result."""
        raise NotImplementedError


class RecordingDisplay(Display):
    """Keeps every published result and outcome in order."""

    def __init__(self) -> None:
        self.results: list[RecomputeResult] = []
        self.outcomes: list[bomb_grid.GameOutcome] = []

    def show_result(self, result: RecomputeResult) -> None:
        self.results.append(result)

    def show_outcome(self, outcome: bomb_grid.GameOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def last(self) -> RecomputeResult | None:
        return self.results[-1] if self.results else None


class ConsoleDisplay(Display):
    """Prints results to the terminal with ANSI colors."""

    def show_result(self, result: RecomputeResult) -> None:
        config = result.config
        print(f"A: {result.stats_a.meta_line(config.cell_count, config.bomb_count)}")
        print(f"B: {result.stats_b.meta_line(config.cell_count, config.bomb_count)}")
        error = result.validation.error
        if error is not None:
            print(f"{_C.RED}{error.describe()}{_C.RESET}")
        if result.validation.advisory:
            print(f"{_C.DIM}{compute_probabilities.ASYNC_PICKS_NOTE}{_C.RESET}")
        for line in compute_probabilities.probability_lines(result.probabilities):
            print(line)

    def show_outcome(self, outcome: bomb_grid.GameOutcome) -> None:
        title, subtitle = outcome.describe()
        print(f"{_C.BOLD}Game Over: {title}{_C.RESET} ({subtitle})")


# =============================================================================
# Orchestrator
# =============================================================================

class RecomputeOrchestrator:
    """Boundary entry point between board commands and the engine.

    Owns the game state and the log-factorial table for the current
    configuration. Mutation commands schedule a recompute; ``tick()``
    runs it. Forced recomputes (new game, reset) run immediately.

    Attributes:
        game: The current GameState.
        display: Collaborator receiving every published result.
        pending: True while a scheduled recompute has not yet run.
        recompute_count: Number of recomputes actually executed.
    """

    def __init__(
        self,
        game: bomb_grid.GameState | None = None,
        display: Display | None = None,
    ) -> None:
        self.game = game if game is not None else bomb_grid.GameState.create()
        self.display = display if display is not None else RecordingDisplay()
        self.pending = False
        self.recompute_count = 0
        self._table = compute_probabilities.build_log_factorial_table(
            self.game.config.cell_count,
        )
        self._table_cells = self.game.config.cell_count

    # -----------------------------------------------------------------
    # Commands
    # -----------------------------------------------------------------

    def new_game(
        self, side_length: object, bomb_count: object,
    ) -> RecomputeResult:
        """Start a new game from raw configuration entries.

        Both entries are clamped (see ``GameConfig.from_inputs``). Boards
        and the outcome latch are replaced, and a recompute runs at once.
        """
        config = bomb_grid.GameConfig.from_inputs(side_length, bomb_count)
        self.game.new_game(config)
        self.pending = False
        return self.recompute_now()

    def reset(self) -> RecomputeResult:
        """Clear both boards and recompute at once."""
        self.game.reset_boards()
        self.pending = False
        return self.recompute_now()

    def set_mark(
        self, player: bomb_grid.Player, index: int, mark: bomb_grid.Mark,
    ) -> None:
        """Apply a ``setMark`` command and schedule a recompute."""
        self.game.set_mark(player, index, mark)
        self.schedule()

    def toggle_safe(self, player: bomb_grid.Player, index: int) -> None:
        """Apply a tap (toggle SAFE) and schedule a recompute."""
        self.game.toggle_safe(player, index)
        self.schedule()

    def toggle_bomb(self, player: bomb_grid.Player, index: int) -> None:
        """Apply a long press (toggle BOMB) and schedule a recompute."""
        self.game.toggle_bomb(player, index)
        self.schedule()

    # -----------------------------------------------------------------
    # Scheduling
    # -----------------------------------------------------------------

    def schedule(self, force: bool = False) -> RecomputeResult | None:
        """Request a recompute.

        Args:
            force: Run immediately instead of waiting for ``tick()``.

        Returns:
            The result when forced, otherwise None.
        """
        if force:
            self.pending = False
            return self.recompute_now()
        self.pending = True
        return None

    def tick(self) -> RecomputeResult | None:
        """Run the pending recompute, if any, against the latest state."""
        if not self.pending:
            return None
        self.pending = False
        return self.recompute_now()

    # -----------------------------------------------------------------
    # Recompute
    # -----------------------------------------------------------------

    def _log_factorials(self) -> list[float]:
        cell_count = self.game.config.cell_count
        if cell_count != self._table_cells:
            self._table = compute_probabilities.build_log_factorial_table(
                cell_count,
            )
            self._table_cells = cell_count
        return self._table

    def recompute_now(self) -> RecomputeResult:
        """Recompute and publish, bypassing the pending flag."""
        game = self.game
        config = game.config
        stats_a, stats_b = game.stats()
        validation = compute_probabilities.validate(
            config.cell_count, config.bomb_count, stats_a, stats_b,
        )
        outcome = game.check_outcome()

        probabilities: compute_probabilities.WinProbabilities | None = None
        if validation.ok:
            probabilities = compute_probabilities.compute_win_probabilities(
                config, stats_a, stats_b, self._log_factorials(),
            )

        result = RecomputeResult(
            config=config,
            stats_a=stats_a,
            stats_b=stats_b,
            validation=validation,
            probabilities=probabilities,
            outcome=outcome,
        )
        self.recompute_count += 1
        self.display.show_result(result)
        if outcome is not None:
            self.display.show_outcome(outcome)
        return result
