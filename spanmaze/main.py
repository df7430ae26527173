import argparse
import logging
import sys
import time

from spanmaze.algo.carvers import CARVERS
from spanmaze.algo.solvers import SOLVERS
from spanmaze.core.analysis import calculate_stats, is_spanning_tree
from spanmaze.core.errors import MazeError
from spanmaze.maze import Maze

logger = logging.getLogger("spanmaze")


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def add_maze_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--width", type=int, default=40, help="Maze width in cells")
    parser.add_argument("--height", type=int, default=30, help="Maze height in cells")
    parser.add_argument("--capacity", type=int, nargs=2, metavar=("MAX_W", "MAX_H"),
                        help="Grid capacity (defaults to the maze size)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--algo", type=str, default="depth_first", choices=sorted(CARVERS),
                        help="Generation algorithm")
    parser.add_argument("--delay", type=float, default=0.0, help="Seconds to pause per step")
    parser.add_argument("--record-events", type=str, help="Save carve/solve events to binary file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="spanmaze: perfect maze generator and solver")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    gen_parser = subparsers.add_parser("generate", help="Generate a maze and print its statistics")
    add_maze_arguments(gen_parser)

    solve_parser = subparsers.add_parser("solve", help="Generate a maze and solve it")
    add_maze_arguments(solve_parser)
    solve_parser.add_argument("--solver", type=str, default="iterative_bfs", choices=sorted(SOLVERS),
                              help="Solver algorithm")

    bench_parser = subparsers.add_parser("benchmark", help="Time every solver on one maze")
    add_maze_arguments(bench_parser)
    return parser


def make_maze(args) -> Maze:
    max_w, max_h = args.capacity if args.capacity else (args.width, args.height)

    evt_writer = None
    if args.record_events:
        from spanmaze.core.events import EventWriter
        evt_writer = EventWriter(args.record_events)
        logger.info(f"Recording events to {args.record_events}...")

    return Maze(max_w, max_h, step_delay=args.delay, event_writer=evt_writer)


def run_generate(maze: Maze, args):
    entrance, exit_ = maze.generate(args.width, args.height, args.algo, seed=args.seed)
    stats = calculate_stats(maze.grid)
    logger.info(f"Entrance {entrance}, exit {exit_}")
    logger.info(f"Stats: {stats}")
    print(f"Perfect maze: {is_spanning_tree(maze.grid)}")


def run_solve(maze: Maze, args):
    maze.generate(args.width, args.height, args.algo, seed=args.seed)
    path = maze.solve(args.solver)
    print(f"Done. Path Length: {len(path)}")
    logger.debug(f"Path: {path}")


def run_benchmark(maze: Maze, args):
    t0 = time.time()
    maze.generate(args.width, args.height, args.algo, seed=args.seed)
    logger.info(f"Generation complete in {time.time() - t0:.4f}s")

    print(f"\n{'ALGORITHM':<20} | {'TIME (s)':<10} | {'PATH LEN':<10} | {'VISITED':<10}")
    print("-" * 60)

    for name in sorted(SOLVERS):
        t_start = time.time()
        path = maze.solve(name)
        duration = time.time() - t_start
        visited = maze.progress().visited_count
        print(f"{name:<20} | {duration:<10.4f} | {len(path):<10} | {visited:<10}")


COMMANDS = {
    "generate": run_generate,
    "solve": run_solve,
    "benchmark": run_benchmark,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    logger.info(f"Running command: {args.command}")

    maze = None
    try:
        maze = make_maze(args)
        COMMANDS[args.command](maze, args)
    except MazeError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    finally:
        if maze is not None and maze.event_writer:
            maze.event_writer.close()
            print(f"\nSaved events to {args.record_events}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
