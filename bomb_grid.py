"""Bomb Grid game model.

Core classes representing a two-player Bomb Grid game: the session
configuration, each player's board of cell marks, derived board
statistics, and end-of-game detection. A player loses as soon as they
have collected every bomb on their own board.

Boards are entered in calculator mode: each mark records what the
player has already revealed (a safe cell or a bomb). Unknown cells are
the ones still face-down.
"""

from __future__ import annotations

import dataclasses
import enum
import math


MAX_SIDE_LENGTH = 100
DEFAULT_SIDE_LENGTH = 3
DEFAULT_BOMB_COUNT = 3


# =============================================================================
# ANSI Color Constants
# =============================================================================

class _Colors:
    """ANSI escape codes for terminal coloring."""
    BLUE = "\033[94m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    ORANGE = "\033[38;5;208m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


# =============================================================================
# Enums
# =============================================================================

class Mark(enum.Enum):
    """A player's declared status for a single cell."""
    UNKNOWN = enum.auto()
    SAFE = enum.auto()
    BOMB = enum.auto()

    def symbol(self) -> tuple[str, str]:
        """Return the plain and ANSI-colored display symbol for this mark."""
        if self == Mark.SAFE:
            return "o", f"{_Colors.GREEN}o{_Colors.RESET}"
        if self == Mark.BOMB:
            return "x", f"{_Colors.BOLD}{_Colors.RED}x{_Colors.RESET}"
        return ".", f"{_Colors.DIM}.{_Colors.RESET}"


class Player(enum.Enum):
    """The two seats at the table."""
    A = "A"
    B = "B"


class Winner(enum.Enum):
    """Final result of a game."""
    A = "A"
    B = "B"
    TIE = "TIE"


class OutcomeReason(enum.Enum):
    """Why the game ended.

    A_COMPLETE / B_COMPLETE: that player has found every bomb (and lost).
    BOTH_COMPLETE: both players completed at detection time.
    NO_BOMBS: the configuration has no bombs, so nobody can lose.
    """
    A_COMPLETE = enum.auto()
    B_COMPLETE = enum.auto()
    BOTH_COMPLETE = enum.auto()
    NO_BOMBS = enum.auto()


# =============================================================================
# Configuration
# =============================================================================

def _clamp_int(value: object, low: int, high: int) -> int:
    """Coerce a raw entry to an int within [low, high].

    Non-numeric or non-finite input falls back to ``low``. Fractional
    input is floored.
    """
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return low
    if not math.isfinite(number):
        return low
    return max(low, min(high, math.floor(number)))


@dataclasses.dataclass(frozen=True)
class GameConfig:
    """Session configuration shared by both boards.

    A bomb count larger than the cell count is representable on purpose:
    it is reported by the probability engine's validation step rather
    than rejected here.

    Attributes:
        side_length: Board side length ``a``. Each board has ``a * a`` cells.
        bomb_count: Number of bombs ``n`` hidden on each board.
    """
    side_length: int = DEFAULT_SIDE_LENGTH
    bomb_count: int = DEFAULT_BOMB_COUNT

    def __post_init__(self) -> None:
        """Validate configuration bounds."""
        if self.side_length < 1:
            raise ValueError(
                f"Side length must be at least 1, got {self.side_length}"
            )
        if self.bomb_count < 0:
            raise ValueError(
                f"Bomb count must be non-negative, got {self.bomb_count}"
            )

    @property
    def cell_count(self) -> int:
        """Total cells per board (N = a²)."""
        return self.side_length * self.side_length

    @classmethod
    def from_inputs(cls, side_length: object, bomb_count: object) -> GameConfig:
        """Build a configuration from raw entry values, clamping both.

        The side length is clamped to ``[1, MAX_SIDE_LENGTH]`` first, then
        the bomb count to ``[0, a²]``.

        Args:
            side_length: Raw side length entry (int, float or string).
            bomb_count: Raw bomb count entry (int, float or string).

        Returns:
            A valid GameConfig.
        """
        a = _clamp_int(side_length, 1, MAX_SIDE_LENGTH)
        n = _clamp_int(bomb_count, 0, a * a)
        return cls(side_length=a, bomb_count=n)

    def __str__(self) -> str:
        return f"{self.side_length}x{self.side_length} board, {self.bomb_count} bombs"


# =============================================================================
# Board Statistics
# =============================================================================

@dataclasses.dataclass(frozen=True)
class BoardStats:
    """Counts derived from one board's marks.

    Attributes:
        picked: Cells already revealed (marked SAFE or BOMB).
        found: Cells revealed as bombs.
        remaining: Cells still UNKNOWN.
    """
    picked: int
    found: int
    remaining: int

    def meta_line(self, cell_count: int, bomb_count: int) -> str:
        """One-line summary shown under each board."""
        return (
            f"Marked {self.picked}/{cell_count} | "
            f"Bombs hit {self.found}/{bomb_count} | "
            f"Remaining {self.remaining}"
        )


def board_stats(marks: list[Mark]) -> BoardStats:
    """Derive picked/found/remaining counts from a sequence of marks.

    Args:
        marks: Per-cell marks of one board.

    Returns:
        The board's BoardStats.
    """
    picked = 0
    found = 0
    for mark in marks:
        if mark != Mark.UNKNOWN:
            picked += 1
        if mark == Mark.BOMB:
            found += 1
    return BoardStats(picked=picked, found=found, remaining=len(marks) - picked)


# =============================================================================
# Board
# =============================================================================

_SHORTHAND_MARKS = {
    ".": Mark.UNKNOWN,
    "?": Mark.UNKNOWN,
    "o": Mark.SAFE,
    "s": Mark.SAFE,
    "x": Mark.BOMB,
    "b": Mark.BOMB,
}


@dataclasses.dataclass
class Board:
    """One player's board of cell marks, in row-major order.

    Statistics are derived from the marks on every call and never
    cached, so any mutation is reflected immediately.

    Attributes:
        marks: One Mark per cell.
    """
    marks: list[Mark]

    @classmethod
    def empty(cls, cell_count: int) -> Board:
        """Create a board with every cell UNKNOWN."""
        return cls(marks=[Mark.UNKNOWN] * cell_count)

    @classmethod
    def from_string(cls, notation: str, cell_count: int | None = None) -> Board:
        """Create a board from shorthand notation.

        Each non-whitespace character is one cell, in row-major order:

            ``.`` or ``?``  — UNKNOWN
            ``o`` or ``s``  — SAFE
            ``x`` or ``b``  — BOMB

        Characters are case-insensitive. Whitespace (including newlines
        between rows) is ignored.

        Args:
            notation: The shorthand string.
            cell_count: If provided, validates the parsed cell count.

        Returns:
            A new Board.

        Raises:
            ValueError: If a character is not recognized, the notation is
                empty, or ``cell_count`` doesn't match.

        Examples:
            A 3x3 board with one safe cell and one bomb::

                Board.from_string("o.. .x. ...")
        """
        chars = [c for c in notation if not c.isspace()]
        if not chars:
            raise ValueError("Notation string contains no cells")
        marks: list[Mark] = []
        for c in chars:
            mark = _SHORTHAND_MARKS.get(c.lower())
            if mark is None:
                raise ValueError(f"Unrecognized cell symbol: {c!r}")
            marks.append(mark)
        if cell_count is not None and len(marks) != cell_count:
            raise ValueError(f"Expected {cell_count} cells, got {len(marks)}")
        return cls(marks=marks)

    def __len__(self) -> int:
        return len(self.marks)

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self.marks):
            raise IndexError(
                f"Cell index {index} out of range (0-{len(self.marks) - 1})"
            )

    def set_mark(self, index: int, mark: Mark) -> None:
        """Set the mark at the given cell.

        Raises:
            IndexError: If index is out of range.
            TypeError: If mark is not a Mark.
        """
        self._check_index(index)
        if not isinstance(mark, Mark):
            raise TypeError(f"Expected a Mark, got {mark!r}")
        self.marks[index] = mark

    def toggle_safe(self, index: int) -> Mark:
        """Tap semantics: SAFE becomes UNKNOWN, anything else becomes SAFE.

        Returns:
            The new mark.
        """
        self._check_index(index)
        new = Mark.UNKNOWN if self.marks[index] == Mark.SAFE else Mark.SAFE
        self.marks[index] = new
        return new

    def toggle_bomb(self, index: int) -> Mark:
        """Long-press semantics: BOMB becomes UNKNOWN, anything else BOMB.

        Returns:
            The new mark.
        """
        self._check_index(index)
        new = Mark.UNKNOWN if self.marks[index] == Mark.BOMB else Mark.BOMB
        self.marks[index] = new
        return new

    def reset(self) -> None:
        """Clear every mark back to UNKNOWN."""
        self.marks = [Mark.UNKNOWN] * len(self.marks)

    def stats(self) -> BoardStats:
        """Current picked/found/remaining counts."""
        return board_stats(self.marks)

    def grid_lines(self, side_length: int) -> list[str]:
        """Render the board as ``side_length`` rows of colored symbols.

        Args:
            side_length: Row width. Must divide the cell count exactly.

        Returns:
            One string per row.
        """
        if side_length < 1 or len(self.marks) % side_length != 0:
            raise ValueError(
                f"Side length {side_length} does not fit {len(self.marks)} cells"
            )
        lines: list[str] = []
        for start in range(0, len(self.marks), side_length):
            row = self.marks[start:start + side_length]
            lines.append(" ".join(m.symbol()[1] for m in row))
        return lines

    def __str__(self) -> str:
        side = math.isqrt(len(self.marks))
        if side * side != len(self.marks) or side == 0:
            return "".join(m.symbol()[1] for m in self.marks)
        return "\n".join(self.grid_lines(side))


# =============================================================================
# Game Outcome
# =============================================================================

@dataclasses.dataclass(frozen=True)
class GameOutcome:
    """Authoritative end-of-game result.

    Attributes:
        winner: Which player won, or TIE.
        reason: Why the game ended.
    """
    winner: Winner
    reason: OutcomeReason

    def describe(self) -> tuple[str, str]:
        """Return a (title, subtitle) pair for display."""
        title = {
            Winner.A: "A Wins",
            Winner.B: "B Wins",
            Winner.TIE: "Tie",
        }[self.winner]
        subtitle = {
            OutcomeReason.A_COMPLETE: "A hit all bombs",
            OutcomeReason.B_COMPLETE: "B hit all bombs",
            OutcomeReason.BOTH_COMPLETE: "Both hit all bombs",
            OutcomeReason.NO_BOMBS: "No bombs",
        }[self.reason]
        return title, subtitle

    def __str__(self) -> str:
        title, subtitle = self.describe()
        return f"{title} ({subtitle})"


def detect_outcome(
    stats_a: BoardStats, stats_b: BoardStats, bomb_count: int,
) -> GameOutcome | None:
    """Check whether either player has collected every bomb.

    Completing all bombs is the losing condition, so when exactly one
    player is complete the other player wins. With zero bombs both
    players are trivially complete and the game is a tie.

    Args:
        stats_a: Player A's board statistics.
        stats_b: Player B's board statistics.
        bomb_count: Bombs per board (n).

    Returns:
        The GameOutcome, or None if the game continues.
    """
    if bomb_count == 0:
        return GameOutcome(Winner.TIE, OutcomeReason.NO_BOMBS)
    a_done = stats_a.found == bomb_count
    b_done = stats_b.found == bomb_count
    if a_done and b_done:
        return GameOutcome(Winner.TIE, OutcomeReason.BOTH_COMPLETE)
    if a_done:
        return GameOutcome(Winner.B, OutcomeReason.A_COMPLETE)
    if b_done:
        return GameOutcome(Winner.A, OutcomeReason.B_COMPLETE)
    return None


# =============================================================================
# GameState
# =============================================================================

@dataclasses.dataclass
class GameState:
    """The complete state of a Bomb Grid session.

    Attributes:
        config: The immutable session configuration.
        board_a: Player A's board.
        board_b: Player B's board.
        game_over: Latch set the first time an outcome is detected.
            Cleared only by starting a new game or resetting the boards.
    """
    config: GameConfig
    board_a: Board
    board_b: Board
    game_over: bool = False

    @classmethod
    def create(cls, config: GameConfig | None = None) -> GameState:
        """Create a fresh game with empty boards.

        Args:
            config: Session configuration. Defaults to a 3x3 board with
                3 bombs.

        Returns:
            A new GameState.
        """
        if config is None:
            config = GameConfig()
        n_cells = config.cell_count
        return cls(
            config=config,
            board_a=Board.empty(n_cells),
            board_b=Board.empty(n_cells),
        )

    @classmethod
    def from_partial_state(
        cls,
        config: GameConfig,
        board_a: Board | str,
        board_b: Board | str,
    ) -> GameState:
        """Create a mid-game state from existing marks (calculator mode).

        Args:
            config: Session configuration.
            board_a: Player A's board or its shorthand notation.
            board_b: Player B's board or its shorthand notation.

        Returns:
            A new GameState with the given boards.

        Raises:
            ValueError: If a board's cell count doesn't match the config.
        """
        boards: list[Board] = []
        for label, board in (("A", board_a), ("B", board_b)):
            if isinstance(board, str):
                board = Board.from_string(board)
            if len(board) != config.cell_count:
                raise ValueError(
                    f"Board {label} has {len(board)} cells, expected "
                    f"{config.cell_count}"
                )
            boards.append(board)
        return cls(
            config=config,
            board_a=boards[0],
            board_b=boards[1],
        )

    def new_game(self, config: GameConfig | None = None) -> None:
        """Replace the configuration and both boards wholesale.

        Args:
            config: New configuration. Defaults to the current one.
        """
        if config is not None:
            self.config = config
        self.board_a = Board.empty(self.config.cell_count)
        self.board_b = Board.empty(self.config.cell_count)
        self.game_over = False

    def reset_boards(self) -> None:
        """Clear both boards' marks and the game-over latch."""
        self.board_a.reset()
        self.board_b.reset()
        self.game_over = False

    def board(self, player: Player) -> Board:
        """Return the board owned by ``player``."""
        return self.board_a if player == Player.A else self.board_b

    def set_mark(self, player: Player, index: int, mark: Mark) -> None:
        """Set a mark on the given player's own board."""
        self.board(player).set_mark(index, mark)

    def toggle_safe(self, player: Player, index: int) -> Mark:
        """Toggle SAFE on the given player's own board."""
        return self.board(player).toggle_safe(index)

    def toggle_bomb(self, player: Player, index: int) -> Mark:
        """Toggle BOMB on the given player's own board."""
        return self.board(player).toggle_bomb(index)

    def stats(self) -> tuple[BoardStats, BoardStats]:
        """Fresh statistics for (A, B)."""
        return self.board_a.stats(), self.board_b.stats()

    def check_outcome(self) -> GameOutcome | None:
        """Detect the end of the game, firing at most once per game.

        Returns:
            The outcome the first time one is detected, otherwise None.
        """
        if self.game_over:
            return None
        stats_a, stats_b = self.stats()
        outcome = detect_outcome(stats_a, stats_b, self.config.bomb_count)
        if outcome is not None:
            self.game_over = True
        return outcome

    def __str__(self) -> str:
        config = self.config
        lines = [
            f"{_Colors.BOLD}=== Bomb Grid ==={_Colors.RESET}",
            str(config),
            "",
        ]
        for label, board in (("A", self.board_a), ("B", self.board_b)):
            lines.append(f"{_Colors.BOLD}Player {label}{_Colors.RESET}")
            for row in board.grid_lines(config.side_length):
                lines.append(f"    {row}")
            lines.append(
                "    " + board.stats().meta_line(config.cell_count, config.bomb_count)
            )
            lines.append("")
        if self.game_over:
            lines.append(f"{_Colors.RED}{_Colors.BOLD}GAME OVER{_Colors.RESET}")
        return "\n".join(lines)
