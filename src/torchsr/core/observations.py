from typing import Iterator, Sequence, Tuple

from ..image.image_data import ImageData, InterpolationMode


class ObservationSet:
    """
    Low-resolution inputs resampled onto the high-resolution grid.

    Each input is copied and upsampled with nearest-neighbour interpolation, so
    every observation keeps the exact intensities of its low-resolution samples.
    The inputs themselves are left untouched.

    Args:
        low_res_images (Sequence[ImageData]): The low-resolution inputs, in order.
        image_size (Tuple[int, int]): Target high-resolution (width, height).
    """
    def __init__(self, low_res_images: Sequence[ImageData], image_size: Tuple[int, int]):
        self.image_size = tuple(image_size)
        observations = []
        for low_res_image in low_res_images:
            observation = low_res_image.clone()
            observation.resize_image(self.image_size, InterpolationMode.NEAREST)
            observations.append(observation)
        self._observations: Tuple[ImageData, ...] = tuple(observations)

    def __len__(self) -> int:
        return len(self._observations)

    def __iter__(self) -> Iterator[ImageData]:
        return iter(self._observations)

    def __getitem__(self, index: int) -> ImageData:
        return self._observations[index]
