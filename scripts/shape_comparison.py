import sys
import os
import time
import argparse

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from spanmaze.algo.carvers import CARVERS
from spanmaze.algo.solvers import SOLVERS
from spanmaze.core.analysis import calculate_stats
from spanmaze.maze import Maze

# Solvers raced on every carved maze
ENABLED_SOLVERS = [
    "iterative_bfs",
    "iterative_dfs",
    "recursive_dfs",
    "wall_follower",
]


def run_comparison():
    parser = argparse.ArgumentParser(description="Compare the shape of depth-first and breadth-first carves")
    parser.add_argument("--width", type=int, default=200, help="Maze Width")
    parser.add_argument("--height", type=int, default=200, help="Maze Height")
    parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    args = parser.parse_args()

    print(f"=== CARVE SHAPE COMPARISON ===")
    print(f"Size: {args.width}x{args.height} | Seed: {args.seed}")
    print("-" * 70)

    maze = Maze(args.width, args.height)

    for algo in sorted(CARVERS):
        t0 = time.time()
        maze.generate(args.width, args.height, algo, seed=args.seed)
        gen_time = time.time() - t0
        stats = calculate_stats(maze.grid)

        print(f"\n[{algo}] carved in {gen_time:.4f}s | "
              f"dead ends {stats['dead_ends']} ({stats['dead_end_percent']:.1f}%) | "
              f"corridors {stats['corridors']} | junctions {stats['intersections']}")
        print(f"{'SOLVER':<16} | {'TIME (s)':<10} | {'PATH LEN':<10} | {'VISITED':<10}")

        for name in ENABLED_SOLVERS:
            if name not in SOLVERS:
                continue
            t_start = time.time()
            path = maze.solve(name)
            duration = time.time() - t_start
            visited = sum(1 for c in maze.iter_cells() if c.visited)
            print(f"{name:<16} | {duration:<10.4f} | {len(path):<10} | {visited:<10}")


if __name__ == "__main__":
    run_comparison()
