import math
import unittest

from betarecall import (
    ErrorKind,
    InvalidArgument,
    Model,
    NonConvergence,
    SolverSettings,
    half_life,
    model_to_percentile_decay,
    predict_recall,
)
from betarecall.math.roots import bisect_root
from betarecall.percentile import _bracket
from betarecall.predict import log_recall


class TestPercentileDecay(unittest.TestCase):
    def test_round_trip(self):
        tol = 1e-3
        models = [
            Model(4.0, 4.0, 10.0),
            Model(2.0, 5.0, 1.0),
            Model(10.0, 3.0, 100.0),
            Model(1.2, 1.2, 0.01),
        ]
        for model in models:
            for p in (0.05, 0.25, 0.5, 0.75, 0.95):
                t = model_to_percentile_decay(model, p, tolerance=tol)
                self.assertGreater(t, 0.0)
                self.assertAlmostEqual(
                    predict_recall(model, t, exact=True),
                    p,
                    delta=tol,
                    msg=f"{model} p={p}",
                )

    def test_symmetric_half_life(self):
        model = Model(2.0, 2.0, 20.0)

        t = model_to_percentile_decay(model, 0.5, tolerance=1e-6)

        self.assertLess(abs(t - 20.0) / 20.0, 1e-3)
        self.assertAlmostEqual(half_life(model, tolerance=1e-6), t)

    def test_unreachable_tolerance(self):
        model = Model(2.0, 2.0, 20.0)

        with self.assertRaises(NonConvergence) as ctx:
            model_to_percentile_decay(model, percentile=0.5, tolerance=1e-150)

        err = ctx.exception
        self.assertEqual(err.kind, ErrorKind.NON_CONVERGENCE)
        self.assertEqual(err.iterations, 10000)
        self.assertLessEqual(err.low, err.high)

    def test_invalid_percentile(self):
        model = Model.from_time(1.0)
        for p in (1.5, 1.0, 0.0, -0.2):
            with self.assertRaises(InvalidArgument):
                model_to_percentile_decay(model, percentile=p)

    def test_invalid_tolerance(self):
        with self.assertRaises(InvalidArgument):
            model_to_percentile_decay(Model.from_time(1.0), tolerance=0.0)

    def test_coarse_is_order_of_magnitude(self):
        models = (Model(4.0, 4.0, 10.0), Model(14.0, 4.0, 10.0), Model(2.0, 9.0, 3.0))
        for model in models:
            exact = half_life(model)
            rough = half_life(model, coarse=True)
            self.assertLess(abs(math.log10(rough / exact)), 1.0, msg=str(model))

    def test_bracket_slides_far(self):
        # halflife near 1244 * time, two precise bracket widths up
        stable = Model(3000.0, 2.0, 1.0)
        t = half_life(stable, tolerance=1e-6)
        self.assertGreater(t, 1000.0)
        self.assertAlmostEqual(predict_recall(stable, t, exact=True), 0.5, places=5)

    def test_root_on_bracket_end(self):
        model = Model(3.0, 5.0, 1.0)
        p = math.exp(log_recall(model, math.e**3))

        t = model_to_percentile_decay(model, p)

        self.assertAlmostEqual(t / math.e**3, 1.0, delta=2e-4)

    def test_zero_on_bracket_end_is_bracketed(self):
        low, high, f_low, f_high = _bracket(lambda x: 3.0 - x, 6.0, 10)

        self.assertEqual((low, high), (-3.0, 3.0))
        self.assertEqual(f_high, 0.0)

    def test_bracket_shift_cap(self):
        model = Model(300.0, 3.0, 1.0)
        settings = SolverSettings(max_bracket_shifts=1)

        with self.assertRaises(NonConvergence):
            half_life(model, coarse=True, settings=settings)

    def test_iteration_cap_is_configurable(self):
        settings = SolverSettings(max_iterations=5)

        with self.assertRaises(NonConvergence) as ctx:
            half_life(Model.from_time(1.0), tolerance=1e-9, settings=settings)
        self.assertEqual(ctx.exception.iterations, 5)


class TestBisectRoot(unittest.TestCase):
    def test_finds_root(self):
        result = bisect_root(
            lambda x: 2.0 - x * x, 0.0, 2.0, tolerance=1e-10, max_iterations=200
        )

        self.assertTrue(result.converged)
        self.assertAlmostEqual(result.root, math.sqrt(2.0), places=9)

    def test_increasing_function(self):
        result = bisect_root(
            lambda x: x - 0.25, 0.0, 1.0, tolerance=1e-12, max_iterations=200
        )

        self.assertAlmostEqual(result.root, 0.25, places=11)

    def test_reports_cap(self):
        result = bisect_root(
            lambda x: 1.0 - x, 0.0, 3.0, tolerance=1e-300, max_iterations=50
        )

        self.assertFalse(result.converged)
        self.assertEqual(result.iterations, 50)


if __name__ == "__main__":
    unittest.main()
