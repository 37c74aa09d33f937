import enum
import torch
import torch.nn.functional as F
from typing import Tuple, Union

from ..utils.misc import DEVICE, DEFAULT_DTYPE


class InterpolationMode(enum.Enum):
    """Resampling kernels accepted by `ImageData.resize_image`."""
    NEAREST = "nearest"
    LINEAR = "bilinear"
    CUBIC = "bicubic"
    AREA = "area"


class ImageData:
    """
    A multi-channel pixel buffer backed by a (C, H, W) tensor.

    Args:
        pixels (torch.Tensor): Pixel values, either (H, W) for a single channel
                               or (C, H, W). Values are copied onto DEVICE with DEFAULT_DTYPE.

    Attributes:
        pixels (torch.Tensor): The (C, H, W) pixel tensor.
    """
    def __init__(self, pixels: torch.Tensor):
        if not isinstance(pixels, torch.Tensor):
            pixels = torch.as_tensor(pixels)
        if pixels.ndim == 2:
            pixels = pixels.unsqueeze(0)
        elif pixels.ndim != 3:
            raise ValueError(f"ImageData expects a (H,W) or (C,H,W) tensor, got shape {tuple(pixels.shape)}")
        self.pixels = pixels.to(device=DEVICE, dtype=DEFAULT_DTYPE).clone()

    @property
    def num_channels(self) -> int:
        return self.pixels.shape[0]

    @property
    def image_size(self) -> Tuple[int, int]:
        """Tuple[int, int]: The (width, height) of the image in pixels."""
        return self.pixels.shape[2], self.pixels.shape[1]

    @property
    def num_pixels(self) -> int:
        width, height = self.image_size
        return width * height

    def clone(self) -> "ImageData":
        return ImageData(self.pixels)

    def resize_image(self, size: Tuple[int, int],
                     interpolation: Union[InterpolationMode, str] = InterpolationMode.NEAREST) -> None:
        """
        Resamples every channel in place to the given size.

        With NEAREST, an integer upscale copies each source pixel into a square block,
        so no new intensities are introduced.

        Args:
            size (Tuple[int, int]): Target (width, height).
            interpolation (InterpolationMode): Resampling kernel. Defaults to NEAREST.
        """
        interpolation = InterpolationMode(interpolation)
        width, height = size
        if width <= 0 or height <= 0:
            raise ValueError(f"Cannot resize image to non-positive size {size}.")
        if (width, height) == self.image_size:
            return
        if interpolation == InterpolationMode.NEAREST:
            # Integer source indices floor(dst * in / out); exact for any scale.
            in_width, in_height = self.image_size
            rows = torch.arange(height, device=self.pixels.device) * in_height // height
            cols = torch.arange(width, device=self.pixels.device) * in_width // width
            self.pixels = self.pixels.index_select(1, rows).index_select(2, cols)
            return
        extra = {} if interpolation == InterpolationMode.AREA else {"align_corners": False}
        resized = F.interpolate(self.pixels.unsqueeze(0), size=(height, width),
                                mode=interpolation.value, **extra)
        self.pixels = resized.squeeze(0)

    def __repr__(self):
        width, height = self.image_size
        return f"ImageData({width}x{height}, channels={self.num_channels})"
