import unittest

import numpy as np
import torch

from betarecall import Model, predict_recall
from betarecall.math.recall_batch import (
    as_tensor,
    models_to_tensors,
    predict_recall_batch,
)


class TestRecallBatch(unittest.TestCase):
    def setUp(self):
        self.models = [
            Model(2.0, 2.0, 2.0),
            Model(4.0, 4.0, 24.0),
            Model(1.5, 9.0, 0.5),
            Model(30.0, 3.0, 100.0),
        ]
        self.elapsed = [2.0, 5.0, 3.0, 1000.0]

    def test_models_to_tensors(self):
        alpha, beta, time = models_to_tensors(self.models)

        self.assertEqual(alpha.shape, (4,))
        self.assertEqual(alpha.dtype, torch.float64)
        self.assertEqual(alpha.tolist(), [m.alpha for m in self.models])
        self.assertEqual(beta.tolist(), [m.beta for m in self.models])
        self.assertEqual(time.tolist(), [m.time for m in self.models])

    def test_empty_models(self):
        alpha, beta, time = models_to_tensors([])

        self.assertEqual(alpha.numel(), 0)

    def test_matches_scalar_predictor(self):
        alpha, beta, time = models_to_tensors(self.models)
        tnow = as_tensor(self.elapsed)

        logs = predict_recall_batch(alpha, beta, time, tnow)
        probs = predict_recall_batch(alpha, beta, time, tnow, exact=True)

        expected = [predict_recall(m, t) for m, t in zip(self.models, self.elapsed)]
        np.testing.assert_allclose(logs.numpy(), expected, rtol=1e-10, atol=1e-12)
        np.testing.assert_allclose(probs.numpy(), np.exp(expected), rtol=1e-10)

    def test_as_tensor_dtype(self):
        tensor = as_tensor([[1, 2], [3, 4]], dtype=torch.float32)

        self.assertEqual(tensor.dtype, torch.float32)
        self.assertEqual(tuple(tensor.shape), (2, 2))


if __name__ == "__main__":
    unittest.main()
