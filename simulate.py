"""Simulation script for Bomb Grid live win odds.

Plays one synchronous game between two players: every round each
player reveals one random cell of their own board, whose bomb layout
is fixed up front. The orchestrator recomputes the conditional odds
after each round and stops at the first completed board.
"""

import random

import bomb_grid
import recompute

SIDE_LENGTH = 4
BOMB_COUNT = 4
SEED = 7


# ── Hidden layouts ──────────────────────────────────────────

def _hidden_layout(cell_count: int, bomb_count: int, rng: random.Random) -> set[int]:
    """Pick the true bomb cells for one board."""
    return set(rng.sample(range(cell_count), bomb_count))


def _reveal_random_cell(
    orchestrator: recompute.RecomputeOrchestrator,
    player: bomb_grid.Player,
    bombs: set[int],
    rng: random.Random,
) -> int:
    """Reveal one UNKNOWN cell on ``player``'s board and mark its truth."""
    board = orchestrator.game.board(player)
    unknown = [i for i, m in enumerate(board.marks) if m == bomb_grid.Mark.UNKNOWN]
    index = rng.choice(unknown)
    mark = bomb_grid.Mark.BOMB if index in bombs else bomb_grid.Mark.SAFE
    orchestrator.set_mark(player, index, mark)
    return index


# ── Main ────────────────────────────────────────────────────

def main() -> None:
    """Play a seeded game round by round, printing the odds each round."""
    print("=" * 60)
    print(f"Bomb Grid simulation ({SIDE_LENGTH}x{SIDE_LENGTH}, {BOMB_COUNT} bombs)")
    print("=" * 60)
    print()

    rng = random.Random(SEED)
    orchestrator = recompute.RecomputeOrchestrator(
        display=recompute.ConsoleDisplay(),
    )
    orchestrator.new_game(SIDE_LENGTH, BOMB_COUNT)
    config = orchestrator.game.config
    bombs_a = _hidden_layout(config.cell_count, config.bomb_count, rng)
    bombs_b = _hidden_layout(config.cell_count, config.bomb_count, rng)

    round_number = 0
    while not orchestrator.game.game_over:
        round_number += 1
        cell_a = _reveal_random_cell(orchestrator, bomb_grid.Player.A, bombs_a, rng)
        cell_b = _reveal_random_cell(orchestrator, bomb_grid.Player.B, bombs_b, rng)
        print()
        print(f"── Round {round_number}: A reveals {cell_a}, B reveals {cell_b}")
        # Both reveals above coalesce into this single recompute.
        orchestrator.tick()

    print()
    print(orchestrator.game)


if __name__ == "__main__":
    main()
