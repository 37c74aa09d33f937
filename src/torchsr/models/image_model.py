import torch


class ImageModel:
    """
    Forward image-formation model for multi-frame super-resolution.

    The model decimates a high-resolution estimate by an integer factor and
    replicates the surviving samples back onto the high-resolution grid, so
    its output can be compared pixel-for-pixel with observations that were
    nearest-neighbour upsampled onto that grid.

    Args:
        downsampling_scale (int): Integer ratio between the high-resolution and
                                  low-resolution image sizes. Must be >= 1.
    """
    def __init__(self, downsampling_scale: int = 2):
        if int(downsampling_scale) != downsampling_scale or downsampling_scale < 1:
            raise ValueError(f"downsampling_scale must be an integer >= 1, got {downsampling_scale}")
        self.downsampling_scale = int(downsampling_scale)

    def apply_to_image(self, pixels: torch.Tensor) -> torch.Tensor:
        """
        Degrades a (C, H, W) high-resolution tensor. Differentiable w.r.t. `pixels`.

        Args:
            pixels (torch.Tensor): High-resolution image, shape (C, H, W).

        Returns:
            torch.Tensor: The degraded image on the same (C, H, W) grid.
        """
        scale = self.downsampling_scale
        if scale == 1:
            return pixels
        height, width = pixels.shape[-2:]
        if height % scale or width % scale:
            raise ValueError(f"Image size {width}x{height} is not divisible by scale {scale}.")
        sampled = pixels[..., ::scale, ::scale]
        return sampled.repeat_interleave(scale, dim=-2).repeat_interleave(scale, dim=-1)

    def __repr__(self):
        return f"ImageModel(downsampling_scale={self.downsampling_scale})"
