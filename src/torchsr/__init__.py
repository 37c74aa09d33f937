# Top-level __init__.py for torchsr package

# Import key classes and functions to make them available at the top level of the package

# Problem assembly
from .core.observations import ObservationSet
from .core.regularization_set import RegularizationSet

# Solver setup
from .solvers.options import SolverOptions, LeastSquaresSolver, DifferentiationMode
from .solvers.map_solver import MapSolver

# Collaborators
from .image.image_data import ImageData, InterpolationMode
from .models.image_model import ImageModel
from .regularization.base import Regularizer
from .regularization.total_variation import (
    TotalVariationRegularizer, BilateralTotalVariationRegularizer, GradientL2Regularizer
)

# Utilities (DEVICE, DTYPE are set globally but can be exposed if needed)
from .utils.misc import DEVICE, DEFAULT_DTYPE, INT32_MAX

__all__ = [
    "ObservationSet", "RegularizationSet",
    "SolverOptions", "LeastSquaresSolver", "DifferentiationMode", "MapSolver",
    "ImageData", "InterpolationMode", "ImageModel",
    "Regularizer", "TotalVariationRegularizer", "BilateralTotalVariationRegularizer",
    "GradientL2Regularizer",
    "DEVICE", "DEFAULT_DTYPE", "INT32_MAX"
]

__version__ = "0.1.0"
