"""Probability engine for Bomb Grid.

Computes the conditional probability that player A wins, player B wins,
or the game ties, given both players' partially revealed boards. Every
still-hidden bomb is assumed uniformly distributed over that player's
unrevealed cells.

Architecture:
    A shared log-factorial table is built once per configuration. Each
    player's completion time (the reveal count at which their last bomb
    is found) gets an exact pmf from an order statistic. The two pmfs
    are compared in a single forward pass over running CDFs.

    Each side's completion time is computed from that side's own reveal
    count, even when the two players have revealed different numbers of
    cells. ``validate`` raises an advisory flag in that case; the
    approximation itself is kept as-is.
"""

from __future__ import annotations

import dataclasses
import enum
import math
import random

import tqdm

import bomb_grid

_C = bomb_grid._Colors


# =============================================================================
# Log-Factorial Table
# =============================================================================

def build_log_factorial_table(cell_count: int) -> list[float]:
    """Build cumulative natural-log factorials ``ln(i!)`` for ``i`` in 0..N.

    Factorials of board-sized numbers overflow a float long before
    N = 10⁴, so every combinatorial ratio is taken as a difference of
    logs and exponentiated only once.

    Args:
        cell_count: Largest argument N.

    Returns:
        A list ``lf`` of N+1 floats with ``lf[0] = 0`` and
        ``lf[i] = lf[i-1] + ln(i)``.

    Raises:
        ValueError: If cell_count is negative.
    """
    if cell_count < 0:
        raise ValueError(f"Cell count must be non-negative, got {cell_count}")
    table = [0.0] * (cell_count + 1)
    for i in range(1, cell_count + 1):
        table[i] = table[i - 1] + math.log(i)
    return table


def log_choose(table: list[float], n: int, k: int) -> float:
    """Natural log of the binomial coefficient C(n, k).

    Returns ``-inf`` outside ``0 <= k <= n`` so that the corresponding
    probability exponentiates to exactly 0.
    """
    if k < 0 or k > n:
        return -math.inf
    return table[n] - table[k] - table[n - k]


# =============================================================================
# Completion-Time Distribution
# =============================================================================

def completion_pmf(
    cell_count: int,
    picked: int,
    remaining: int,
    remaining_bombs: int,
    table: list[float],
) -> list[float]:
    """Pmf of one player's completion time, conditional on their marks.

    The ``b`` hidden bombs occupy a uniformly random ``b``-subset of the
    ``R`` remaining cells, and future reveals follow a uniformly random
    ordering of those cells. The completion time is ``picked + U``,
    where ``U`` is the position of the last bomb in that ordering:

        P(U = u) = C(u-1, b-1) / C(R, b),   u = b..R

    (exactly ``b-1`` bombs among the first ``u-1`` cells, and a bomb at
    position ``u``). With ``b == 0`` the player has already completed,
    so the pmf is a point mass at ``picked``.

    Args:
        cell_count: Total cells per board (N).
        picked: Cells this player has already revealed.
        remaining: Cells this player has not yet revealed (R).
        remaining_bombs: Bombs still hidden on this board (b).
        table: Log-factorial table covering at least 0..N.

    Returns:
        A list of N+1 probabilities indexed by absolute completion time.

    Raises:
        ValueError: If the inputs are inconsistent. Run ``validate``
            first; user-entered states never reach this point invalid.
    """
    if len(table) < cell_count + 1:
        raise ValueError(
            f"Log-factorial table covers 0..{len(table) - 1}, "
            f"need 0..{cell_count}"
        )
    if picked < 0 or remaining < 0 or picked + remaining > cell_count:
        raise ValueError(
            f"Inconsistent board counts: picked={picked}, "
            f"remaining={remaining}, cells={cell_count}"
        )
    if not (0 <= remaining_bombs <= remaining):
        raise ValueError(
            f"Remaining bombs ({remaining_bombs}) must be between 0 and "
            f"remaining cells ({remaining})"
        )

    pmf = [0.0] * (cell_count + 1)
    if remaining_bombs == 0:
        pmf[picked] = 1.0
        return pmf

    denom_log = log_choose(table, remaining, remaining_bombs)
    for u in range(remaining_bombs, remaining + 1):
        num_log = log_choose(table, u - 1, remaining_bombs - 1)
        pmf[picked + u] += math.exp(num_log - denom_log)
    return pmf


# =============================================================================
# Outcome Comparison
# =============================================================================

@dataclasses.dataclass(frozen=True)
class WinProbabilities:
    """Probability triple for one game state.

    Finishing first is the losing event: A wins when B's completion time
    is strictly earlier than A's.

    Attributes:
        win_a: P(T_B < T_A).
        win_b: P(T_A < T_B).
        tie: P(T_A == T_B).
    """
    win_a: float
    win_b: float
    tie: float

    @property
    def total(self) -> float:
        return self.win_a + self.win_b + self.tie


HARD_TIE = WinProbabilities(win_a=0.0, win_b=0.0, tie=1.0)


def compare_pmfs(pmf_a: list[float], pmf_b: list[float]) -> WinProbabilities:
    """Compare two independent completion-time pmfs in one pass.

    Sweeps ``t`` upward while accumulating both CDFs. After including
    ``t``, ``1 - cdf_a`` is ``P(T_A > t)``, so ``pmf_b[t] * (1 - cdf_a)``
    is the mass where B completes at ``t`` and A is still going. This is
    O(N) instead of the O(N²) double sum, and works for any pair of
    independent discrete distributions on the same support.

    The triple is renormalized by its sum to absorb floating drift.
    With valid pmfs that sum is already 1 up to rounding.

    Args:
        pmf_a: Player A's completion-time pmf.
        pmf_b: Player B's completion-time pmf.

    Returns:
        The WinProbabilities for (A, B).

    Raises:
        ValueError: If the pmfs have different lengths.
    """
    if len(pmf_a) != len(pmf_b):
        raise ValueError(
            f"Pmf lengths differ: {len(pmf_a)} vs {len(pmf_b)}"
        )
    tie = 0.0
    win_a = 0.0
    win_b = 0.0
    cdf_a = 0.0
    cdf_b = 0.0
    for p_a, p_b in zip(pmf_a, pmf_b):
        tie += p_a * p_b
        cdf_a += p_a
        cdf_b += p_b
        win_a += p_b * (1.0 - cdf_a)
        win_b += p_a * (1.0 - cdf_b)

    # A CDF can overshoot 1.0 by an ulp, leaving a tiny negative sum.
    win_a = max(win_a, 0.0)
    win_b = max(win_b, 0.0)
    total = win_a + win_b + tie
    if total > 0:
        win_a /= total
        win_b /= total
        tie /= total
    return WinProbabilities(win_a=win_a, win_b=win_b, tie=tie)


# =============================================================================
# Validation
# =============================================================================

class ErrorCategory(enum.Enum):
    """Whether an inconsistency comes from the configuration or the marks."""
    CONFIG = enum.auto()
    STATE = enum.auto()


class ErrorKind(enum.Enum):
    """Classified reasons the engine refuses to compute.

    All are user-recoverable by adjusting marks or the configuration.
    """
    TARGET_COUNT_EXCEEDS_CELLS = enum.auto()
    FOUND_EXCEEDS_TARGET = enum.auto()
    NEGATIVE_REMAINING_TARGETS = enum.auto()
    INSUFFICIENT_REMAINING_CELLS = enum.auto()

    @property
    def category(self) -> ErrorCategory:
        if self == ErrorKind.TARGET_COUNT_EXCEEDS_CELLS:
            return ErrorCategory.CONFIG
        return ErrorCategory.STATE

    def describe(self) -> str:
        """User-facing message for this error."""
        return {
            ErrorKind.TARGET_COUNT_EXCEEDS_CELLS:
                "Error: n cannot exceed a².",
            ErrorKind.FOUND_EXCEEDS_TARGET:
                "Error: bombs marked exceed n.",
            ErrorKind.NEGATIVE_REMAINING_TARGETS:
                "Error: remaining bombs is negative (reduce red cells).",
            ErrorKind.INSUFFICIENT_REMAINING_CELLS:
                "Error: remaining cells are fewer than remaining bombs "
                "(reduce gray cells or increase n).",
        }[self]


ASYNC_PICKS_NOTE = (
    "Note: the game is played in synchronous rounds (each round both A and B "
    "draw one cell). Your marked counts differ, so we compute by each "
    "side's own draws."
)


@dataclasses.dataclass(frozen=True)
class ValidationResult:
    """Outcome of the validation gate.

    Attributes:
        error: The first inconsistency found, or None.
        advisory: True when the two players have revealed different
            numbers of cells. Not an error: each side's completion time
            is still computed from its own reveal count.
    """
    error: ErrorKind | None = None
    advisory: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def _classify(
    cell_count: int,
    bomb_count: int,
    stats_a: bomb_grid.BoardStats,
    stats_b: bomb_grid.BoardStats,
) -> ErrorKind | None:
    if bomb_count > cell_count:
        return ErrorKind.TARGET_COUNT_EXCEEDS_CELLS
    if stats_a.found > bomb_count or stats_b.found > bomb_count:
        return ErrorKind.FOUND_EXCEEDS_TARGET
    bombs_a = bomb_count - stats_a.found
    bombs_b = bomb_count - stats_b.found
    # Implied by the previous check; kept as its own classification.
    if bombs_a < 0 or bombs_b < 0:
        return ErrorKind.NEGATIVE_REMAINING_TARGETS
    if bombs_a > stats_a.remaining or bombs_b > stats_b.remaining:
        return ErrorKind.INSUFFICIENT_REMAINING_CELLS
    return None


def validate(
    cell_count: int,
    bomb_count: int,
    stats_a: bomb_grid.BoardStats,
    stats_b: bomb_grid.BoardStats,
) -> ValidationResult:
    """Check configuration and board consistency before any pmf is built.

    Checks run in order and the first match wins: bomb count vs. cells,
    bombs found vs. bomb count, negative remaining bombs, and remaining
    bombs vs. remaining cells (each for either player).

    Args:
        cell_count: Cells per board (N).
        bomb_count: Bombs per board (n).
        stats_a: Player A's board statistics.
        stats_b: Player B's board statistics.

    Returns:
        A ValidationResult. The advisory flag is set whenever the picked
        counts differ, regardless of the error.
    """
    return ValidationResult(
        error=_classify(cell_count, bomb_count, stats_a, stats_b),
        advisory=stats_a.picked != stats_b.picked,
    )


# =============================================================================
# Engine Entry Point
# =============================================================================

def compute_win_probabilities(
    config: bomb_grid.GameConfig,
    stats_a: bomb_grid.BoardStats,
    stats_b: bomb_grid.BoardStats,
    table: list[float],
) -> WinProbabilities:
    """Win/lose/tie probabilities for a validated game state.

    With zero bombs there is no completion event to compare, so the
    result is a hard tie regardless of either board.

    Args:
        config: Session configuration.
        stats_a: Player A's board statistics.
        stats_b: Player B's board statistics.
        table: Log-factorial table for ``config.cell_count``.

    Returns:
        The WinProbabilities.

    Raises:
        ValueError: If the state does not pass ``validate``.
    """
    n_cells = config.cell_count
    n_bombs = config.bomb_count
    result = validate(n_cells, n_bombs, stats_a, stats_b)
    if result.error is not None:
        raise ValueError(
            f"Cannot compute probabilities: {result.error.describe()}"
        )
    if n_bombs == 0:
        return HARD_TIE
    pmf_a = completion_pmf(
        n_cells, stats_a.picked, stats_a.remaining,
        n_bombs - stats_a.found, table,
    )
    pmf_b = completion_pmf(
        n_cells, stats_b.picked, stats_b.remaining,
        n_bombs - stats_b.found, table,
    )
    return compare_pmfs(pmf_a, pmf_b)


def analyze_game(game: bomb_grid.GameState) -> WinProbabilities:
    """Convenience wrapper: probabilities for a GameState.

    Builds a fresh log-factorial table. Callers recomputing repeatedly
    for the same configuration should build the table once and call
    ``compute_win_probabilities`` directly.
    """
    stats_a, stats_b = game.stats()
    table = build_log_factorial_table(game.config.cell_count)
    return compute_win_probabilities(game.config, stats_a, stats_b, table)


# =============================================================================
# Monte Carlo Cross-Check
# =============================================================================

def sample_completion_time(
    picked: int,
    remaining: int,
    remaining_bombs: int,
    rng: random.Random,
) -> int:
    """Draw one completion time by shuffling the remaining cells.

    Places ``remaining_bombs`` bombs uniformly among ``remaining`` cells
    and reveals them in a random order.

    Returns:
        ``picked`` plus the 1-indexed position of the last bomb revealed.
    """
    if remaining_bombs == 0:
        return picked
    positions = rng.sample(range(1, remaining + 1), remaining_bombs)
    return picked + max(positions)


def monte_carlo_win_probabilities(
    config: bomb_grid.GameConfig,
    stats_a: bomb_grid.BoardStats,
    stats_b: bomb_grid.BoardStats,
    num_samples: int = 10_000,
    seed: int | None = None,
    show_progress: bool = False,
) -> WinProbabilities:
    """Estimate the probability triple by simulating both boards.

    Independent of the analytic pmfs, so it serves as a cross-check of
    the order-statistic derivation and the CDF sweep.

    Args:
        config: Session configuration.
        stats_a: Player A's board statistics.
        stats_b: Player B's board statistics.
        num_samples: Number of simulated futures.
        seed: Optional random seed for reproducibility.
        show_progress: If True, display a tqdm progress bar.

    Returns:
        Empirical WinProbabilities.

    Raises:
        ValueError: If the state does not pass ``validate`` or
            ``num_samples`` is not positive.
    """
    if num_samples < 1:
        raise ValueError(f"num_samples must be positive, got {num_samples}")
    n_bombs = config.bomb_count
    result = validate(config.cell_count, n_bombs, stats_a, stats_b)
    if result.error is not None:
        raise ValueError(
            f"Cannot simulate probabilities: {result.error.describe()}"
        )
    if n_bombs == 0:
        return HARD_TIE

    rng = random.Random(seed)
    wins_a = 0
    wins_b = 0
    ties = 0
    for _ in tqdm.tqdm(
        range(num_samples),
        desc="Sampling",
        unit=" samples",
        dynamic_ncols=True,
        disable=not show_progress,
    ):
        t_a = sample_completion_time(
            stats_a.picked, stats_a.remaining, n_bombs - stats_a.found, rng,
        )
        t_b = sample_completion_time(
            stats_b.picked, stats_b.remaining, n_bombs - stats_b.found, rng,
        )
        if t_b < t_a:
            wins_a += 1
        elif t_a < t_b:
            wins_b += 1
        else:
            ties += 1
    return WinProbabilities(
        win_a=wins_a / num_samples,
        win_b=wins_b / num_samples,
        tie=ties / num_samples,
    )


# =============================================================================
# Display Helpers
# =============================================================================

def format_probability(probability: float | None) -> str:
    """Percentage with two decimals, or an em dash when blank."""
    if probability is None or not math.isfinite(probability):
        return "—"
    return f"{probability * 100:.2f}%"


def _prob_colored(probability: float) -> str:
    """Return a probability string colored by magnitude."""
    text = f"{format_probability(probability):>7}"
    if probability >= 0.75:
        return f"{_C.GREEN}{text}{_C.RESET}"
    elif probability >= 0.50:
        return f"{_C.BLUE}{text}{_C.RESET}"
    elif probability >= 0.25:
        return f"{_C.YELLOW}{text}{_C.RESET}"
    else:
        return f"{_C.RED}{text}{_C.RESET}"


def probability_lines(probs: WinProbabilities | None) -> list[str]:
    """Three display lines for the probability panel.

    Blank (``—``) entries are shown when ``probs`` is None.
    """
    if probs is None:
        return [
            f"  A Wins: {format_probability(None):>7}",
            f"  B Wins: {format_probability(None):>7}",
            f"  Tie:    {format_probability(None):>7}",
        ]
    return [
        f"  A Wins: {_prob_colored(probs.win_a)}",
        f"  B Wins: {_prob_colored(probs.win_b)}",
        f"  Tie:    {_prob_colored(probs.tie)}",
    ]


def print_probability_analysis(game: bomb_grid.GameState) -> None:
    """Print both boards and the live win odds for a game state.

    Validation errors are printed in place of the odds; the advisory
    note is printed whenever the reveal counts differ.
    """
    print(game)
    print(f"{_C.BOLD}{'─' * 40}{_C.RESET}")
    print(f"{_C.BOLD}Live Win Odds (Conditional){_C.RESET}")
    print(f"{_C.BOLD}{'─' * 40}{_C.RESET}")

    stats_a, stats_b = game.stats()
    config = game.config
    result = validate(config.cell_count, config.bomb_count, stats_a, stats_b)
    probs: WinProbabilities | None = None
    if result.error is not None:
        print(f"{_C.RED}{result.error.describe()}{_C.RESET}")
    else:
        probs = analyze_game(game)
    for line in probability_lines(probs):
        print(line)
    if result.advisory:
        print(f"{_C.DIM}{ASYNC_PICKS_NOTE}{_C.RESET}")
    print()
