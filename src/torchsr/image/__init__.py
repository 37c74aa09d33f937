from .image_data import ImageData, InterpolationMode

__all__ = [
    "ImageData",
    "InterpolationMode"
]
