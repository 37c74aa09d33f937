import torch
import abc
from typing import Optional, Tuple

from ..utils.misc import DEVICE, DEFAULT_DTYPE


class Regularizer(abc.ABC):
    """
    Abstract base class for regularization (prior) terms of a MAP objective.

    A regularizer scores a candidate high-resolution estimate and contributes an
    additive gradient. Subclasses implement `cost`; they may also implement
    `analytical_gradient`, otherwise the gradient is obtained with autograd.

    Args:
        image_size (Tuple[int, int]): (width, height) of the estimates this term accepts.
        num_channels (int): Number of channels of the estimates this term accepts.
        name (str, optional): An optional name for the term.

    Attributes:
        image_size (Tuple[int, int]): Expected (width, height).
        num_channels (int): Expected channel count.
        name (str): Name of the term.
    """
    def __init__(self, image_size: Tuple[int, int], num_channels: int, name: Optional[str] = None):
        self.image_size = tuple(image_size)
        self.num_channels = num_channels
        self.name = name if name else self.__class__.__name__

    @abc.abstractmethod
    def cost(self, estimate: torch.Tensor) -> torch.Tensor:
        """
        Computes the scalar cost of this term.

        Args:
            estimate (torch.Tensor): The high-resolution estimate, shape (C, H, W).

        Returns:
            torch.Tensor: A 0-dim tensor holding the cost.
        """
        pass

    def analytical_gradient(self, estimate: torch.Tensor) -> Optional[torch.Tensor]:
        """
        Optionally implemented by subclasses to provide a closed-form gradient.

        Returns:
            Optional[torch.Tensor]: d(cost)/d(estimate) with the shape of `estimate`,
                                    or None if not implemented.
        """
        return None

    def _check_estimate(self, estimate: torch.Tensor):
        width, height = self.image_size
        expected_shape = (self.num_channels, height, width)
        if tuple(estimate.shape) != expected_shape:
            raise ValueError(
                f"Regularizer '{self.name}' expects an estimate of shape {expected_shape}, "
                f"got {tuple(estimate.shape)}."
            )

    def compute_cost_and_gradient(self, estimate: torch.Tensor) -> Tuple[float, torch.Tensor]:
        """
        Evaluates the term and its gradient at `estimate`.

        Args:
            estimate (torch.Tensor): The high-resolution estimate, shape (C, H, W).

        Returns:
            Tuple[float, torch.Tensor]:
                - cost (float): The term's cost (unweighted).
                - gradient (torch.Tensor): Gradient with the same shape as `estimate`.
        """
        self._check_estimate(estimate)
        x = estimate.detach().to(device=DEVICE, dtype=DEFAULT_DTYPE)

        gradient = self.analytical_gradient(x)
        if gradient is not None:
            if tuple(gradient.shape) != tuple(x.shape):
                raise ValueError(
                    f"Analytical gradient for '{self.name}' has shape {tuple(gradient.shape)}, "
                    f"expected {tuple(x.shape)}."
                )
            with torch.no_grad():
                cost_value = self.cost(x).item()
            return cost_value, gradient

        # Fallback to autograd
        x = x.clone().requires_grad_(True)
        cost_tensor = self.cost(x)
        gradient = None
        if cost_tensor.requires_grad:
            (gradient,) = torch.autograd.grad(cost_tensor, x, allow_unused=True)
        if gradient is None:  # cost does not depend on the estimate
            gradient = torch.zeros_like(x)
        return cost_tensor.item(), gradient.detach()

    def __repr__(self):
        return f"{self.name}"
