import unittest
import io
import sys
import os
import shutil
import tempfile
from contextlib import redirect_stdout

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from spanmaze.core.events import EVT_CARVE, EventReader
from spanmaze.main import build_parser, main


class TestMain(unittest.TestCase):
    def run_main(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def test_generate(self):
        code, out = self.run_main("generate", "--width", "9", "--height", "7", "--seed", "3")
        self.assertEqual(code, 0)
        self.assertIn("Perfect maze: True", out)

    def test_solve(self):
        code, out = self.run_main("solve", "--width", "1", "--height", "1",
                                  "--solver", "wall_follower")
        self.assertEqual(code, 0)
        self.assertIn("Path Length: 1", out)

    def test_benchmark(self):
        code, out = self.run_main("benchmark", "--width", "6", "--height", "6", "--seed", "1")
        self.assertEqual(code, 0)
        for name in ("iterative_bfs", "iterative_dfs", "recursive_dfs", "wall_follower"):
            self.assertIn(name, out)

    def test_invalid_dimensions_exit_code(self):
        code, _ = self.run_main("generate", "--width", "50", "--height", "5",
                                "--capacity", "10", "10")
        self.assertEqual(code, 1)

    def test_no_command(self):
        code, out = self.run_main()
        self.assertEqual(code, 0)
        self.assertIn("usage", out)

    def test_record_events(self):
        out_dir = tempfile.mkdtemp(prefix="spanmaze_cli_")
        try:
            path = os.path.join(out_dir, "gen.events")
            code, _ = self.run_main("generate", "--width", "5", "--height", "4",
                                    "--record-events", path)
            self.assertEqual(code, 0)
            with EventReader(path) as reader:
                carves = [t for t, _ in reader.stream_events() if t == EVT_CARVE]
            self.assertEqual(len(carves), 19)
        finally:
            shutil.rmtree(out_dir, ignore_errors=True)

    def test_parser_defaults(self):
        args = build_parser().parse_args(["solve"])
        self.assertEqual(args.algo, "depth_first")
        self.assertEqual(args.solver, "iterative_bfs")
        self.assertEqual((args.width, args.height), (40, 30))


if __name__ == '__main__':
    unittest.main()
