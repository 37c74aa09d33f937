import math
import torch
import unittest

from torchsr.core.regularization_set import RegularizationSet
from torchsr.regularization.base import Regularizer
from torchsr.regularization.total_variation import (
    TotalVariationRegularizer, BilateralTotalVariationRegularizer, GradientL2Regularizer
)
from torchsr.utils.misc import DEVICE, DEFAULT_DTYPE


# --- Helper regularizer (specific to these tests) ---
class SquaredNormRegularizer(Regularizer):
    """sum(x^2), autograd gradient only."""
    def cost(self, estimate: torch.Tensor) -> torch.Tensor:
        return torch.sum(estimate**2)


class ConstantRegularizer(Regularizer):
    """A term that ignores the estimate."""
    def cost(self, estimate: torch.Tensor) -> torch.Tensor:
        return torch.tensor(3.0, device=DEVICE, dtype=DEFAULT_DTYPE)


class TestRegularizerBase(unittest.TestCase):
    """Tests for the Regularizer capability and its autograd fallback."""

    def setUp(self):
        torch.manual_seed(2)
        self.image_size = (5, 4)  # width, height
        self.estimate = torch.rand(2, 4, 5, device=DEVICE, dtype=DEFAULT_DTYPE)

    def test_autograd_gradient(self):
        regularizer = SquaredNormRegularizer(self.image_size, 2)
        cost, gradient = regularizer.compute_cost_and_gradient(self.estimate)
        self.assertAlmostEqual(cost, torch.sum(self.estimate**2).item())
        self.assertTrue(torch.allclose(gradient, 2.0 * self.estimate))
        self.assertFalse(gradient.requires_grad)

    def test_cost_independent_of_estimate(self):
        cost, gradient = ConstantRegularizer(self.image_size, 2).compute_cost_and_gradient(self.estimate)
        self.assertEqual(cost, 3.0)
        self.assertTrue(torch.equal(gradient, torch.zeros_like(self.estimate)))

    def test_shape_mismatch(self):
        regularizer = SquaredNormRegularizer(self.image_size, 2)
        with self.assertRaises(ValueError):
            regularizer.compute_cost_and_gradient(torch.zeros(3, 4, 5))
        with self.assertRaises(ValueError):
            regularizer.compute_cost_and_gradient(torch.zeros(2, 5, 4))

    def test_default_name(self):
        self.assertEqual(SquaredNormRegularizer(self.image_size, 2).name, "SquaredNormRegularizer")
        self.assertEqual(SquaredNormRegularizer(self.image_size, 2, name="prior").name, "prior")


class TestSmoothnessRegularizers(unittest.TestCase):
    """Tests for the total variation family of priors."""

    def setUp(self):
        torch.manual_seed(3)
        self.image_size = (6, 5)
        self.constant = torch.full((1, 5, 6), 0.4, device=DEVICE, dtype=DEFAULT_DTYPE)
        self.textured = torch.rand(1, 5, 6, device=DEVICE, dtype=DEFAULT_DTYPE)

    def test_total_variation_constant_image(self):
        regularizer = TotalVariationRegularizer(self.image_size, 1, epsilon=1e-8)
        cost, gradient = regularizer.compute_cost_and_gradient(self.constant)
        self.assertAlmostEqual(cost, 30 * math.sqrt(1e-8))
        self.assertTrue(torch.allclose(gradient, torch.zeros_like(gradient)))

    def test_total_variation_known_values(self):
        pixels = torch.tensor([[[0.0, 3.0], [4.0, 3.0]]], device=DEVICE, dtype=DEFAULT_DTYPE)
        isotropic = TotalVariationRegularizer((2, 2), 1, epsilon=0.0)
        anisotropic = TotalVariationRegularizer((2, 2), 1, epsilon=0.0, isotropic=False)
        # dx = [[3, 0], [-1, 0]], dy = [[4, 0], [0, 0]]
        self.assertAlmostEqual(isotropic.cost(pixels).item(), 5.0 + 1.0)
        self.assertAlmostEqual(anisotropic.cost(pixels).item(), 3.0 + 1.0 + 4.0)

    def test_total_variation_prefers_smooth_images(self):
        regularizer = TotalVariationRegularizer(self.image_size, 1)
        smooth_cost, _ = regularizer.compute_cost_and_gradient(self.constant)
        rough_cost, gradient = regularizer.compute_cost_and_gradient(self.textured)
        self.assertGreater(rough_cost, smooth_cost)
        self.assertEqual(gradient.shape, self.textured.shape)

    def test_bilateral_total_variation(self):
        regularizer = BilateralTotalVariationRegularizer(self.image_size, 1, scale_range=2,
                                                         decay=0.5, epsilon=0.0)
        self.assertAlmostEqual(regularizer.cost(self.constant).item(), 0.0)
        self.assertGreater(regularizer.cost(self.textured).item(), 0.0)

    def test_bilateral_total_variation_single_shift(self):
        """With scale_range=1 and a horizontal ramp, only shifts with an x-component contribute."""
        ramp = torch.arange(4, device=DEVICE, dtype=DEFAULT_DTYPE).repeat(3, 1).unsqueeze(0)  # (1,3,4)
        regularizer = BilateralTotalVariationRegularizer((4, 3), 1, scale_range=1, decay=0.5, epsilon=0.0)
        # Shifts used: (1,0), (-1,1), (0,1), (1,1)
        # (1,0): 3 rows * 3 cols * |1| * 0.5 = 4.5
        # (-1,1): 2 rows * 3 cols * |1| * 0.25 = 1.5
        # (0,1): 0
        # (1,1): 2 rows * 3 cols * |1| * 0.25 = 1.5
        self.assertAlmostEqual(regularizer.cost(ramp).item(), 7.5)

    def test_bilateral_invalid_range(self):
        with self.assertRaises(ValueError):
            BilateralTotalVariationRegularizer(self.image_size, 1, scale_range=0)

    def test_gradient_l2_known_value(self):
        pixels = torch.tensor([[[0.0, 1.0], [2.0, 3.0]]], device=DEVICE, dtype=DEFAULT_DTYPE)
        cost, _ = GradientL2Regularizer((2, 2), 1).compute_cost_and_gradient(pixels)
        self.assertAlmostEqual(cost, 1.0 + 1.0 + 4.0 + 4.0)

    def test_gradient_l2_analytical_matches_autograd(self):
        regularizer = GradientL2Regularizer(self.image_size, 1)
        _, analytical = regularizer.compute_cost_and_gradient(self.textured)
        x = self.textured.clone().requires_grad_(True)
        (expected,) = torch.autograd.grad(regularizer.cost(x), x)
        self.assertTrue(torch.allclose(analytical, expected))


class TestRegularizationSet(unittest.TestCase):
    """Tests for weighted aggregation of regularization terms."""

    def setUp(self):
        self.image_size = (3, 3)
        self.estimate = torch.rand(1, 3, 3, device=DEVICE, dtype=DEFAULT_DTYPE)

    def test_empty_set(self):
        regularizers = RegularizationSet()
        self.assertEqual(len(regularizers), 0)
        self.assertEqual(regularizers.parameter_sum(), 0.0)
        cost, gradient = regularizers.compute_cost_and_gradient(self.estimate)
        self.assertEqual(cost, 0.0)
        self.assertTrue(torch.equal(gradient, torch.zeros_like(self.estimate)))

    def test_parameter_sum_and_order(self):
        regularizers = RegularizationSet()
        terms = [SquaredNormRegularizer(self.image_size, 1, name=f"t{i}") for i in range(3)]
        for term, weight in zip(terms, (0.1, 0.2, 0.7)):
            regularizers.add(term, weight)
        self.assertAlmostEqual(regularizers.parameter_sum(), 1.0, places=12)
        self.assertEqual([term.name for term, _ in regularizers], ["t0", "t1", "t2"])

    def test_weighted_cost_and_gradient(self):
        regularizers = RegularizationSet()
        squared = SquaredNormRegularizer(self.image_size, 1)
        smooth = GradientL2Regularizer(self.image_size, 1)
        regularizers.add(squared, 2.0)
        regularizers.add(smooth, -0.5)
        cost, gradient = regularizers.compute_cost_and_gradient(self.estimate)
        squared_cost, squared_gradient = squared.compute_cost_and_gradient(self.estimate)
        smooth_cost, smooth_gradient = smooth.compute_cost_and_gradient(self.estimate)
        self.assertAlmostEqual(cost, 2.0 * squared_cost - 0.5 * smooth_cost)
        self.assertTrue(torch.allclose(gradient, 2.0 * squared_gradient - 0.5 * smooth_gradient))


if __name__ == '__main__':
    unittest.main()
