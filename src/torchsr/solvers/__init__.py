from .options import SolverOptions, LeastSquaresSolver, DifferentiationMode
from .map_solver import MapSolver

__all__ = [
    "SolverOptions",
    "LeastSquaresSolver",
    "DifferentiationMode",
    "MapSolver"
]
