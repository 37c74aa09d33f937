from .observations import ObservationSet
from .regularization_set import RegularizationSet

__all__ = [
    "ObservationSet",
    "RegularizationSet"
]
