"""Cross-check the exact win odds of one state against Monte Carlo.

Runs the analytic engine and a 200k-sample simulation on the same
mid-game state (with a progress bar) and prints both triples side by
side.
"""

import pathlib
import sys

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent))

import bomb_grid
import compute_probabilities

NUM_SAMPLES = 200_000


def main() -> None:
    config = bomb_grid.GameConfig(side_length=6, bomb_count=5)
    game = bomb_grid.GameState.from_partial_state(
        config,
        board_a="ox.... .o.... ..x... ...o.. ...... ......",
        board_b="o..... ...... .o.... ....o. ...... .....o",
    )
    stats_a, stats_b = game.stats()

    exact = compute_probabilities.analyze_game(game)
    sampled = compute_probabilities.monte_carlo_win_probabilities(
        config, stats_a, stats_b,
        num_samples=NUM_SAMPLES, seed=1, show_progress=True,
    )

    fmt = compute_probabilities.format_probability
    print()
    print(f"{'':8}{'Exact':>10}{'Sampled':>10}")
    print(f"{'A Wins':8}{fmt(exact.win_a):>10}{fmt(sampled.win_a):>10}")
    print(f"{'B Wins':8}{fmt(exact.win_b):>10}{fmt(sampled.win_b):>10}")
    print(f"{'Tie':8}{fmt(exact.tie):>10}{fmt(sampled.tie):>10}")


if __name__ == "__main__":
    main()
