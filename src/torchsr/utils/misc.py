import torch

# --- Configuration ---
DEVICE = torch.device("cuda" if torch.cuda.is_available() else "cpu")
"""The primary device (CPU or CUDA GPU) for pixel buffers and cost evaluation."""

DEFAULT_DTYPE = torch.float64
"""The default floating point precision for pixel values and gradients."""

INT32_MAX = 2**31 - 1
"""Largest data-point count the external optimizers can index."""

torch.set_default_dtype(DEFAULT_DTYPE)
