from .misc import DEVICE, DEFAULT_DTYPE, INT32_MAX

__all__ = [
    "DEVICE",
    "DEFAULT_DTYPE",
    "INT32_MAX"
]
