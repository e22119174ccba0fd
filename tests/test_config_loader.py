import json
import tempfile
import unittest
from pathlib import Path

from betarecall import DEFAULT_SETTINGS, InvalidArgument, SolverSettings
from betarecall.config_loader import load_solver_settings
from betarecall.defaults import (
    COARSE_BRACKET_WIDTH,
    DEFAULT_TOLERANCE,
    MAX_ITERATIONS,
    PRECISE_BRACKET_WIDTH,
    REBALANCE_SKEW,
)


class TestSolverSettings(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, data) -> Path:
        path = self.root / "solver.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_defaults(self):
        self.assertEqual(DEFAULT_SETTINGS.rebalance_skew, REBALANCE_SKEW)
        self.assertEqual(DEFAULT_SETTINGS.coarse_bracket_width, COARSE_BRACKET_WIDTH)
        self.assertEqual(DEFAULT_SETTINGS.precise_bracket_width, PRECISE_BRACKET_WIDTH)
        self.assertEqual(DEFAULT_SETTINGS.tolerance, DEFAULT_TOLERANCE)
        self.assertEqual(DEFAULT_SETTINGS.max_iterations, MAX_ITERATIONS)
        self.assertEqual(
            (REBALANCE_SKEW, COARSE_BRACKET_WIDTH, PRECISE_BRACKET_WIDTH),
            (2.0, 1.0, 6.0),
        )
        self.assertEqual((DEFAULT_TOLERANCE, MAX_ITERATIONS), (1e-4, 10000))

    def test_partial_override(self):
        path = self._write({"rebalance_skew": 3, "max_iterations": 500.0})

        settings = load_solver_settings(path)

        self.assertEqual(settings.rebalance_skew, 3.0)
        self.assertEqual(settings.max_iterations, 500)
        self.assertIsInstance(settings.max_iterations, int)
        self.assertEqual(settings.tolerance, DEFAULT_TOLERANCE)

    def test_unknown_key(self):
        path = self._write({"skew": 3})

        with self.assertRaises(ValueError):
            load_solver_settings(path)

    def test_non_numeric_value(self):
        path = self._write({"tolerance": "small"})

        with self.assertRaises(ValueError):
            load_solver_settings(path)

    def test_fractional_count(self):
        path = self._write({"max_iterations": 1.5})

        with self.assertRaises(ValueError):
            load_solver_settings(path)

    def test_not_an_object(self):
        path = self._write([1, 2, 3])

        with self.assertRaises(ValueError):
            load_solver_settings(path)

    def test_invalid_values(self):
        for kwargs in (
            {"rebalance_skew": 1.0},
            {"coarse_bracket_width": 0.0},
            {"tolerance": -1e-3},
            {"max_iterations": 0},
            {"max_bracket_shifts": -1},
        ):
            with self.assertRaises(InvalidArgument):
                SolverSettings(**kwargs)


if __name__ == "__main__":
    unittest.main()
