"""Calculator-mode probability analysis for a mid-game Bomb Grid state.

Demonstrates using ``GameState.from_partial_state()`` with board
shorthand to enter both players' marks and print the live win odds.
"""

import pathlib
import sys

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent))

import bomb_grid
import compute_probabilities


# ── Main ────────────────────────────────────────────────────

def main() -> None:
    """A 5x5 game with 4 bombs per board.

    Player A has revealed 8 cells and hit 2 bombs. Player B has revealed
    8 cells and hit 1 bomb. A has fewer bombs left to find among a
    similar number of cells, so A is the more likely loser.

        A:  o o . . .      B:  o . . . o
            . x . o .          . . o . .
            o . . . x          . o . x .
            . . o . .          o . . . o
            . . . o .          . . . o .
    """
    print("=" * 60)
    print("Mid-game probability analysis")
    print("=" * 60)
    print()

    config = bomb_grid.GameConfig(side_length=5, bomb_count=4)
    game = bomb_grid.GameState.from_partial_state(
        config,
        board_a=(
            "oo... "
            ".x.o. "
            "o...x "
            "..o.. "
            "...o."
        ),
        board_b=(
            "o...o "
            "..o.. "
            ".o.x. "
            "o...o "
            "...o."
        ),
    )
    compute_probabilities.print_probability_analysis(game)


if __name__ == "__main__":
    main()
