"""Benchmark the analytic win odds against Monte Carlo sampling.

Generates random mid-game board states over a range of board sizes and
bomb counts, computes the exact probability triple with the
order-statistic engine, and compares it to a Monte Carlo estimate of
the same state. Reports absolute error statistics and timing for both
methods.
"""

import pathlib
import random
import statistics
import sys
import time

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent))

import bomb_grid
import compute_probabilities


def _random_board(
    config: bomb_grid.GameConfig, rng: random.Random,
) -> bomb_grid.Board:
    """Reveal a random prefix of a random layout, stopping before completion."""
    cells = list(range(config.cell_count))
    bombs = set(rng.sample(cells, config.bomb_count))
    order = cells[:]
    rng.shuffle(order)
    board = bomb_grid.Board.empty(config.cell_count)
    reveals = rng.randint(0, config.cell_count - 1)
    found = 0
    for index in order[:reveals]:
        if index in bombs:
            if found + 1 == config.bomb_count:
                break
            found += 1
            board.set_mark(index, bomb_grid.Mark.BOMB)
        else:
            board.set_mark(index, bomb_grid.Mark.SAFE)
    return board


def main() -> None:
    num_states = 200
    num_samples = 5_000
    rng = random.Random(2024)

    errors: list[float] = []
    exact_seconds = 0.0
    mc_seconds = 0.0

    for state_idx in range(num_states):
        side = rng.randint(2, 8)
        n_bombs = rng.randint(1, side * side)
        config = bomb_grid.GameConfig(side_length=side, bomb_count=n_bombs)
        stats_a = _random_board(config, rng).stats()
        stats_b = _random_board(config, rng).stats()
        table = compute_probabilities.build_log_factorial_table(config.cell_count)

        start = time.perf_counter()
        exact = compute_probabilities.compute_win_probabilities(
            config, stats_a, stats_b, table,
        )
        exact_seconds += time.perf_counter() - start

        start = time.perf_counter()
        sampled = compute_probabilities.monte_carlo_win_probabilities(
            config, stats_a, stats_b,
            num_samples=num_samples, seed=state_idx,
        )
        mc_seconds += time.perf_counter() - start

        errors.extend([
            abs(exact.win_a - sampled.win_a),
            abs(exact.win_b - sampled.win_b),
            abs(exact.tie - sampled.tie),
        ])

        if (state_idx + 1) % 50 == 0:
            print(f"  Completed {state_idx + 1}/{num_states} states...")

    print()
    print("=" * 60)
    print(f"ANALYTIC vs MONTE CARLO ({num_states} states, {num_samples} samples)")
    print("=" * 60)
    print(f"  Mean abs error:   {statistics.mean(errors):.4f}")
    print(f"  Median abs error: {statistics.median(errors):.4f}")
    print(f"  Max abs error:    {max(errors):.4f}")
    print(f"  StdDev:           {statistics.stdev(errors):.4f}")
    print()
    print(f"  Exact engine:  {exact_seconds * 1000 / num_states:.3f} ms/state")
    print(f"  Monte Carlo:   {mc_seconds * 1000 / num_states:.3f} ms/state")


if __name__ == "__main__":
    main()
