import enum


class LeastSquaresSolver(enum.Enum):
    """Iterative engine used to minimize the MAP objective."""
    CONJUGATE_GRADIENT = "conjugate gradient"
    LBFGS = "LBFGS"


class DifferentiationMode(enum.Enum):
    """How the engine obtains gradients of the objective."""
    ANALYTICAL = "analytical"
    NUMERICAL = "numerical"


class SolverOptions:
    """
    Configuration options for MAP super-resolution solvers.

    Args:
        least_squares_solver (LeastSquaresSolver): Nonlinear conjugate gradient or LBFGS.
        differentiation_mode (DifferentiationMode): Analytical or numerical (finite-difference) gradients.
        numerical_differentiation_step (float): Finite-difference step. Must be positive when
                                                `differentiation_mode` is NUMERICAL.
        split_channels (bool): If True, each channel is optimized independently.
        gradient_norm_threshold (float): Stop when the gradient norm drops below this value.
        cost_decrease_threshold (float): Stop when the cost decrease drops below this value.
        parameter_variation_threshold (float): Stop when the parameter change drops below this value.
        max_iterations (int): Maximum number of iterations for the solver.
        verbose (bool): If True, print the solver configuration and progress.
    """
    def __init__(self, least_squares_solver: LeastSquaresSolver = LeastSquaresSolver.CONJUGATE_GRADIENT,
                 differentiation_mode: DifferentiationMode = DifferentiationMode.ANALYTICAL,
                 numerical_differentiation_step: float = 1.0e-10,
                 split_channels: bool = False,
                 gradient_norm_threshold: float = 1.0e-6,
                 cost_decrease_threshold: float = 1.0e-6,
                 parameter_variation_threshold: float = 1.0e-6,
                 max_iterations: int = 50, verbose: bool = False):
        self.least_squares_solver = LeastSquaresSolver(least_squares_solver)
        self.differentiation_mode = DifferentiationMode(differentiation_mode)
        if self.differentiation_mode == DifferentiationMode.NUMERICAL and numerical_differentiation_step <= 0:
            raise ValueError(
                f"numerical_differentiation_step must be positive, got {numerical_differentiation_step}")
        self.numerical_differentiation_step = numerical_differentiation_step
        self.split_channels = split_channels
        self.gradient_norm_threshold = gradient_norm_threshold
        self.cost_decrease_threshold = cost_decrease_threshold
        self.parameter_variation_threshold = parameter_variation_threshold
        self.max_iterations = max_iterations
        self.verbose = verbose

    def adjust_thresholds_adaptively(self, num_parameters: int, regularization_parameter_sum: float):
        """
        Scales the three stopping thresholds by the problem size times the total
        regularization weight.

        Thresholds are only ever scaled up: if the product is below 1.0 nothing changes.

        Args:
            num_parameters (int): Total number of scalar unknowns.
            regularization_parameter_sum (float): Sum of all regularization weights.
        """
        threshold_scale = num_parameters * regularization_parameter_sum
        if threshold_scale < 1.0:
            return
        self.gradient_norm_threshold *= threshold_scale
        self.cost_decrease_threshold *= threshold_scale
        self.parameter_variation_threshold *= threshold_scale

    def describe(self) -> str:
        """Returns a human-readable summary of the configuration."""
        line = f"  {'Least squares solver:':<37}{self.least_squares_solver.value}"
        if self.differentiation_mode == DifferentiationMode.NUMERICAL:
            line += f" (numerical differentiation [step = {self.numerical_differentiation_step}])"
        else:
            line += " (analytical differentiation)"
        lines = [line]
        if self.split_channels:
            lines.append("  Channel splitting enabled.")
        lines.append(f"  {'Threshold 1 (gradient norm):':<37}{self.gradient_norm_threshold}")
        lines.append(f"  {'Threshold 2 (cost decrease):':<37}{self.cost_decrease_threshold}")
        lines.append(f"  {'Threshold 3 (parameter variation):':<37}{self.parameter_variation_threshold}")
        return "\n".join(lines)

    def print_solver_options(self):
        print(self.describe())
