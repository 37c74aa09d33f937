import torch
from typing import Iterator, List, Tuple

from ..regularization.base import Regularizer


class RegularizationSet:
    """
    An ordered collection of weighted regularization terms.

    Terms are held by reference, so the same regularizer may be shared with
    other solvers. Weights are not validated; a negative weight subtracts the
    term's cost.

    Attributes:
        entries (List[Tuple[Regularizer, float]]): (term, weight) pairs in insertion order.
    """
    def __init__(self):
        self.entries: List[Tuple[Regularizer, float]] = []

    def add(self, regularizer: Regularizer, weight: float):
        self.entries.append((regularizer, weight))

    def parameter_sum(self) -> float:
        """Returns the sum of all registered weights, or 0.0 if there are none."""
        regularization_parameter_sum = 0.0
        for _regularizer, weight in self.entries:
            regularization_parameter_sum += weight
        return regularization_parameter_sum

    def compute_cost_and_gradient(self, estimate: torch.Tensor) -> Tuple[float, torch.Tensor]:
        """
        Evaluates the weighted sum of all terms at `estimate`.

        Args:
            estimate (torch.Tensor): The high-resolution estimate, shape (C, H, W).

        Returns:
            Tuple[float, torch.Tensor]: Total weighted cost and its gradient (shape of `estimate`).
        """
        total_cost = 0.0
        total_gradient = torch.zeros_like(estimate.detach())
        for regularizer, weight in self.entries:
            cost, gradient = regularizer.compute_cost_and_gradient(estimate)
            total_cost += weight * cost
            total_gradient += weight * gradient
        return total_cost, total_gradient

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Tuple[Regularizer, float]]:
        return iter(self.entries)
