import torch
import torch.nn.functional as F
from typing import Optional, Tuple

from .base import Regularizer


def _forward_differences(x: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
    """Horizontal and vertical forward differences, zero on the last column/row."""
    dx = F.pad(x[..., :, 1:] - x[..., :, :-1], (0, 1))
    dy = F.pad(x[..., 1:, :] - x[..., :-1, :], (0, 0, 0, 1))
    return dx, dy


def _shifted_difference(x: torch.Tensor, shift_x: int, shift_y: int) -> torch.Tensor:
    """x - x shifted by (shift_x, shift_y), restricted to the overlapping region."""
    height, width = x.shape[-2:]
    y0, y1 = max(0, -shift_y), height - max(0, shift_y)
    x0, x1 = max(0, -shift_x), width - max(0, shift_x)
    return x[..., y0:y1, x0:x1] - x[..., y0 + shift_y:y1 + shift_y, x0 + shift_x:x1 + shift_x]


class TotalVariationRegularizer(Regularizer):
    """
    Smoothed total variation prior.

    Args:
        image_size (Tuple[int, int]): (width, height) of the estimate.
        num_channels (int): Number of channels of the estimate.
        epsilon (float): Smoothing constant keeping the cost differentiable at zero gradient.
        isotropic (bool): If True, penalize sqrt(dx^2 + dy^2); otherwise |dx| + |dy|.
    """
    def __init__(self, image_size: Tuple[int, int], num_channels: int,
                 epsilon: float = 1e-8, isotropic: bool = True, name: Optional[str] = None):
        super().__init__(image_size, num_channels, name=name)
        self.epsilon = epsilon
        self.isotropic = isotropic

    def cost(self, estimate: torch.Tensor) -> torch.Tensor:
        dx, dy = _forward_differences(estimate)
        if self.isotropic:
            return torch.sqrt(dx**2 + dy**2 + self.epsilon).sum()
        return (torch.sqrt(dx**2 + self.epsilon) + torch.sqrt(dy**2 + self.epsilon)).sum()


class BilateralTotalVariationRegularizer(Regularizer):
    """
    Bilateral total variation prior: a decayed sum of L1 differences between the
    estimate and copies of itself shifted by up to `scale_range` pixels.

    Args:
        image_size (Tuple[int, int]): (width, height) of the estimate.
        num_channels (int): Number of channels of the estimate.
        scale_range (int): Largest shift, in pixels, along each axis.
        decay (float): Spatial decay factor in (0, 1]; a shift (l, m) is weighted by decay^(|l|+|m|).
        epsilon (float): Smoothing constant for the L1 norm.
    """
    def __init__(self, image_size: Tuple[int, int], num_channels: int,
                 scale_range: int = 2, decay: float = 0.7, epsilon: float = 1e-8,
                 name: Optional[str] = None):
        super().__init__(image_size, num_channels, name=name)
        if scale_range < 1:
            raise ValueError(f"scale_range must be >= 1, got {scale_range}")
        self.scale_range = scale_range
        self.decay = decay
        self.epsilon = epsilon

    def cost(self, estimate: torch.Tensor) -> torch.Tensor:
        p = self.scale_range
        total = estimate.new_zeros(())
        for shift_y in range(0, p + 1):
            for shift_x in range(-p, p + 1):
                if shift_x + shift_y < 0 or (shift_x == 0 and shift_y == 0):
                    continue
                diff = _shifted_difference(estimate, shift_x, shift_y)
                weight = self.decay ** (abs(shift_x) + abs(shift_y))
                total = total + weight * torch.sqrt(diff**2 + self.epsilon).sum()
        return total


class GradientL2Regularizer(Regularizer):
    """Tikhonov prior on the squared image gradient, with a closed-form gradient."""

    def cost(self, estimate: torch.Tensor) -> torch.Tensor:
        dx = estimate[..., :, 1:] - estimate[..., :, :-1]
        dy = estimate[..., 1:, :] - estimate[..., :-1, :]
        return (dx**2).sum() + (dy**2).sum()

    def analytical_gradient(self, estimate: torch.Tensor) -> Optional[torch.Tensor]:
        dx = estimate[..., :, 1:] - estimate[..., :, :-1]
        dy = estimate[..., 1:, :] - estimate[..., :-1, :]
        gradient = torch.zeros_like(estimate)
        gradient[..., :, :-1] -= 2.0 * dx
        gradient[..., :, 1:] += 2.0 * dx
        gradient[..., :-1, :] -= 2.0 * dy
        gradient[..., 1:, :] += 2.0 * dy
        return gradient
