import torch
from typing import Sequence, Tuple, Union

from .options import SolverOptions
from ..core.observations import ObservationSet
from ..core.regularization_set import RegularizationSet
from ..image.image_data import ImageData
from ..models.image_model import ImageModel
from ..regularization.base import Regularizer
from ..utils.misc import DEVICE, DEFAULT_DTYPE, INT32_MAX


class MapSolver:
    """
    Sets up a Maximum-A-Posteriori super-resolution problem.

    The objective is a data-fidelity term over all observations plus a weighted
    sum of regularization terms. This class validates the inputs, places the
    low-resolution observations on the high-resolution grid and answers the
    size queries an external optimizer needs; it does not iterate itself.

    Args:
        image_model (ImageModel): The forward image-formation model. Only its
                                  `downsampling_scale` and `apply_to_image` are used.
        low_res_images (Sequence[ImageData]): The low-resolution observations.
                                              All must have the same channel count.
        print_solver_output (bool): If True, print the solver configuration when options are adjusted.

    Attributes:
        image_model (ImageModel): The forward model (shared, never modified).
        observations (ObservationSet): Low-res inputs resampled onto `image_size`.
        regularizers (RegularizationSet): Registered (regularizer, weight) pairs.
    """
    def __init__(self, image_model: ImageModel, low_res_images: Sequence[ImageData],
                 print_solver_output: bool = True):
        self.image_model = image_model
        self.print_solver_output = print_solver_output

        if len(low_res_images) == 0:
            raise ValueError("Cannot super-resolve with 0 low-res images.")

        self._num_channels = low_res_images[0].num_channels
        for low_res_image in low_res_images[1:]:
            if low_res_image.num_channels != self._num_channels:
                raise ValueError(
                    f"Image channel counts do not match up: expected {self._num_channels}, "
                    f"got {low_res_image.num_channels}.")

        # All inputs are assumed to share the first image's size.
        upsampling_scale = image_model.downsampling_scale
        lr_width, lr_height = low_res_images[0].image_size
        self._image_size = (lr_width * upsampling_scale, lr_height * upsampling_scale)

        self.observations = ObservationSet(low_res_images, self._image_size)
        self.regularizers = RegularizationSet()

    @property
    def image_size(self) -> Tuple[int, int]:
        """Tuple[int, int]: The high-resolution (width, height)."""
        return self._image_size

    @property
    def num_channels(self) -> int:
        return self._num_channels

    @property
    def num_pixels(self) -> int:
        width, height = self._image_size
        return width * height

    def add_regularizer(self, regularizer: Regularizer, regularization_parameter: float):
        """
        Registers a regularization term with the given weight. The weight is not validated.

        Args:
            regularizer (Regularizer): The term. It is held by reference, not copied.
            regularization_parameter (float): The term's weight in the objective.
        """
        self.regularizers.add(regularizer, regularization_parameter)

    def get_regularization_parameter_sum(self) -> float:
        return self.regularizers.parameter_sum()

    def get_num_data_points(self) -> int:
        """
        Returns the number of scalar unknowns, i.e. pixels times channels.

        Raises:
            OverflowError: If the count exceeds the signed 32-bit range the optimizers index with.
        """
        num_data_points = self.num_pixels * self.num_channels
        if num_data_points > INT32_MAX:
            raise OverflowError(
                f"Number of data points ({num_data_points}) exceeds maximum size ({INT32_MAX}).")
        return num_data_points

    def adjust_solver_options(self, options: SolverOptions) -> SolverOptions:
        """
        Rescales the options' stopping thresholds for this problem. Call once, after
        all regularizers are registered and before the optimizer starts iterating.

        Args:
            options (SolverOptions): Options to adjust in place.

        Returns:
            SolverOptions: The same options object.
        """
        options.adjust_thresholds_adaptively(
            self.get_num_data_points(), self.get_regularization_parameter_sum())
        if self.print_solver_output and options.verbose:
            print("Solver options:")
            options.print_solver_options()
        return options

    def _as_estimate(self, estimate: Union[torch.Tensor, ImageData]) -> torch.Tensor:
        if isinstance(estimate, ImageData):
            estimate = estimate.pixels
        width, height = self._image_size
        expected_shape = (self._num_channels, height, width)
        if tuple(estimate.shape) != expected_shape:
            raise ValueError(f"Estimate must have shape {expected_shape}, got {tuple(estimate.shape)}.")
        return estimate.detach().to(device=DEVICE, dtype=DEFAULT_DTYPE)

    def compute_data_cost_and_gradient(self, estimate: Union[torch.Tensor, ImageData]) -> Tuple[float, torch.Tensor]:
        """
        Evaluates the data-fidelity term sum_k ||A(x) - y_k||^2 and its gradient.

        Args:
            estimate (Union[torch.Tensor, ImageData]): High-resolution estimate x, shape (C, H, W).

        Returns:
            Tuple[float, torch.Tensor]: The data cost and d(cost)/dx.
        """
        x = self._as_estimate(estimate).clone().requires_grad_(True)
        degraded = self.image_model.apply_to_image(x)
        data_cost = x.new_zeros(())
        for observation in self.observations:
            residual = degraded - observation.pixels
            data_cost = data_cost + torch.sum(residual**2)
        (gradient,) = torch.autograd.grad(data_cost, x)
        return data_cost.item(), gradient.detach()

    def compute_objective(self, estimate: Union[torch.Tensor, ImageData]) -> Tuple[float, torch.Tensor]:
        """
        Evaluates the full MAP objective: data term plus weighted regularization.

        Args:
            estimate (Union[torch.Tensor, ImageData]): High-resolution estimate, shape (C, H, W).

        Returns:
            Tuple[float, torch.Tensor]: Total cost and gradient (same shape as the estimate).
        """
        x = self._as_estimate(estimate)
        data_cost, data_gradient = self.compute_data_cost_and_gradient(x)
        regularization_cost, regularization_gradient = self.regularizers.compute_cost_and_gradient(x)
        return data_cost + regularization_cost, data_gradient + regularization_gradient
