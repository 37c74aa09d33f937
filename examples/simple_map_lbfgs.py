import torch
from torchsr.image import ImageData
from torchsr.models import ImageModel
from torchsr.regularization import TotalVariationRegularizer
from torchsr.solvers import MapSolver, SolverOptions, LeastSquaresSolver
from torchsr.utils.misc import DEVICE, DEFAULT_DTYPE

# 1. A synthetic high-resolution scene and four noisy low-resolution observations of it
scale = 2
ground_truth = torch.zeros(1, 32, 32, device=DEVICE, dtype=DEFAULT_DTYPE)
ground_truth[:, 8:24, 8:24] = 1.0
low_res_images = [
    ImageData(ground_truth[:, ::scale, ::scale] + 0.02 * torch.randn(1, 16, 16, device=DEVICE))
    for _ in range(4)
]

# 2. Set up the MAP problem and register a smoothness prior
solver = MapSolver(ImageModel(downsampling_scale=scale), low_res_images)
solver.add_regularizer(TotalVariationRegularizer(solver.image_size, solver.num_channels), 0.01)

# 3. Configure stopping criteria and scale them for this problem size
options = SolverOptions(least_squares_solver=LeastSquaresSolver.LBFGS, max_iterations=100, verbose=True)
solver.adjust_solver_options(options)

# 4. Hand the objective to an external engine (here torch's LBFGS)
estimate = solver.observations[0].pixels.clone().requires_grad_(True)
optimizer = torch.optim.LBFGS([estimate], max_iter=options.max_iterations,
                              tolerance_grad=options.gradient_norm_threshold,
                              tolerance_change=options.cost_decrease_threshold,
                              line_search_fn="strong_wolfe")

def closure():
    optimizer.zero_grad()
    cost, gradient = solver.compute_objective(estimate)
    estimate.grad = gradient
    return torch.tensor(cost, device=DEVICE, dtype=DEFAULT_DTYPE)

optimizer.step(closure)
final_cost, _ = solver.compute_objective(estimate)
print(f"Final objective: {final_cost:.6e}")
print(f"Mean absolute error: {torch.mean(torch.abs(estimate.detach() - ground_truth)).item():.4f}")
