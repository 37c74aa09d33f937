from .base import Regularizer
from .total_variation import (
    TotalVariationRegularizer,
    BilateralTotalVariationRegularizer,
    GradientL2Regularizer
)

__all__ = [
    "Regularizer",
    "TotalVariationRegularizer",
    "BilateralTotalVariationRegularizer",
    "GradientL2Regularizer"
]
