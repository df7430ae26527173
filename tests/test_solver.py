import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from spanmaze.algo.carvers import breadth_first_carve, depth_first_carve
from spanmaze.algo.solvers import (
    AutoDFS,
    IterativeBFS,
    IterativeDFS,
    RecursiveDFS,
    WallFollower,
    get_solver,
    solve,
)
from spanmaze.core.analysis import tree_distance
from spanmaze.core.errors import NoPathFoundError
from spanmaze.core.grid import Grid

import random

STRATEGIES = ["recursive_dfs", "iterative_dfs", "iterative_bfs", "wall_follower", "dfs"]


class TestSolvers(unittest.TestCase):
    def create_serpentine(self):
        # Passages: (0,0)-(0,1)-(0,2)-(1,2)-(1,1)-(1,0)-(2,0)-(2,1)-(2,2)
        # Entrance (2,0), exit (0,2)
        grid = Grid(3, 3)
        grid.initialize(3, 3)
        chain = [(0, 0), (0, 1), (0, 2), (1, 2), (1, 1), (1, 0), (2, 0), (2, 1), (2, 2)]
        for a, b in zip(chain, chain[1:]):
            grid.remove_wall_between(a, b)
        grid.open_boundary(2, 0, Grid.WEST)
        grid.open_boundary(0, 2, Grid.EAST)
        return grid, (2, 0), (0, 2)

    def test_serpentine_paths(self):
        expected = [(2, 0), (1, 0), (1, 1), (1, 2), (0, 2)]
        for name in STRATEGIES:
            with self.subTest(solver=name):
                grid, start, end = self.create_serpentine()
                self.assertEqual(solve(grid, start, end, name), expected)

    def test_bfs_path_length_is_tree_distance(self):
        grid, start, end = self.create_serpentine()
        bfs = IterativeBFS(grid)
        path = bfs.run_all(start, end)
        self.assertEqual(len(path), tree_distance(grid, start, end) + 1)
        # (0,0) and (0,1) hang off the far end of the tree and are never reached
        self.assertEqual(bfs.visited_count, 7)
        self.assertFalse(grid.is_visited(0, 0))
        self.assertFalse(grid.is_visited(0, 1))

    def test_iterative_dfs_scan_order(self):
        grid, start, end = self.create_serpentine()
        dfs = IterativeDFS(grid)
        dfs.run_all(start, end)
        # Up is pushed after Right, so it is popped first and (2,1) is never expanded
        self.assertEqual(dfs.visited_count, 5)
        self.assertFalse(grid.is_visited(2, 1))

    def test_recursive_dfs_backtracks(self):
        grid, start, end = self.create_serpentine()
        scanned = list(RecursiveDFS(grid).run(start, end))
        # Right first: into the dead end (2,1)-(2,2), back out, then Up
        self.assertEqual(scanned[:5], [(2, 0), (2, 1), (2, 2), (2, 1), (2, 0)])
        # Dead-end cells stay visited but lose their direction
        self.assertTrue(grid.is_visited(2, 2))
        self.assertIsNone(grid.path_direction(2, 1))
        self.assertIsNone(grid.path_direction(2, 2))

    def test_path_directions(self):
        grid, start, end = self.create_serpentine()
        solve(grid, start, end, "iterative_bfs")
        self.assertEqual(grid.path_direction(2, 0), Grid.NORTH)
        self.assertEqual(grid.path_direction(1, 0), Grid.EAST)
        self.assertEqual(grid.path_direction(1, 1), Grid.EAST)
        self.assertEqual(grid.path_direction(1, 2), Grid.NORTH)
        self.assertIsNone(grid.path_direction(0, 2))
        self.assertIsNone(grid.path_direction(2, 1))

    def test_wall_follower_walk(self):
        grid, start, end = self.create_serpentine()
        wf = WallFollower(grid)
        walk = list(wf.run(start, end))
        # Turns round once in the dead end (2,2)
        self.assertEqual(walk, [
            (2, 0), (2, 1), (2, 2), (2, 2), (2, 1), (2, 0),
            (1, 0), (1, 1), (1, 2), (0, 2),
        ])
        self.assertEqual(wf.path, [(2, 0), (1, 0), (1, 1), (1, 2), (0, 2)])
        self.assertEqual(wf.facing, Grid.NORTH)

    def test_strategies_agree(self):
        for carve in (depth_first_carve, breadth_first_carve):
            for seed in range(5):
                grid = Grid(15, 12)
                entrance, exit_ = carve(grid, 15, 12, random.Random(seed))
                paths = {name: solve(grid, entrance, exit_, name) for name in STRATEGIES}

                reference = paths["iterative_bfs"]
                self.assertEqual(reference[0], entrance)
                self.assertEqual(reference[-1], exit_)
                self.assertEqual(len(reference), tree_distance(grid, entrance, exit_) + 1)
                for name, path in paths.items():
                    with self.subTest(carve=carve.__name__, seed=seed, solver=name):
                        self.assertEqual(path, reference)

    def test_consecutive_cells_are_connected(self):
        grid = Grid(20, 20)
        entrance, exit_ = depth_first_carve(grid, 20, 20, random.Random(99))
        path = solve(grid, entrance, exit_, "wall_follower")
        for a, b in zip(path, path[1:]):
            direction = grid.direction_between(a, b)
            self.assertFalse(grid.has_wall(a[0], a[1], direction))

    def test_single_cell_path(self):
        grid = Grid(1, 1)
        entrance, exit_ = depth_first_carve(grid, 1, 1, random.Random(1))
        for name in STRATEGIES:
            with self.subTest(solver=name):
                self.assertEqual(solve(grid, entrance, exit_, name), [entrance])

    def test_no_path(self):
        for name in STRATEGIES:
            with self.subTest(solver=name):
                grid = Grid(5, 5)  # All walls
                grid.initialize(5, 5)
                with self.assertRaises(NoPathFoundError):
                    solve(grid, (0, 0), (4, 4), name)

    def test_recursive_dfs_deep_maze(self):
        # Far longer than the default interpreter recursion limit would allow
        grid = Grid(1, 3000)
        entrance, exit_ = depth_first_carve(grid, 1, 3000, random.Random(0))
        path = RecursiveDFS(grid).run_all(entrance, exit_)
        self.assertEqual(len(path), abs(exit_[0] - entrance[0]) + 1)

    def test_auto_dfs_selection(self):
        small = Grid(10, 10)
        small.initialize(10, 10)
        self.assertIsInstance(AutoDFS(small).delegate, RecursiveDFS)

        large = Grid(80, 40)
        large.initialize(80, 40)
        self.assertIsInstance(AutoDFS(large).delegate, IterativeDFS)

    def test_get_solver(self):
        self.assertIs(get_solver("iterative_bfs"), IterativeBFS)
        self.assertIs(get_solver("bfs"), IterativeBFS)
        self.assertIs(get_solver("right"), WallFollower)
        with self.assertRaises(ValueError):
            get_solver("astar")


if __name__ == '__main__':
    unittest.main()
