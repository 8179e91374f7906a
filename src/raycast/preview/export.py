"""Image export utilities for rendered images.

The renderer hands over linear float buffers; this module is the encoder side:
it clamps to [0, 1], optionally gamma encodes, quantizes to 8 bits and writes a
PNG through Pillow.

Example:
    >>> from raycast.core.renderer import render
    >>> from raycast.preview.export import save_png
    >>>
    >>> image = render(scene)
    >>> save_png(image, "output.png")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from raycast.preview.display import process_image_for_display


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to uint8 for display/export.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma correction value (default 1.0, i.e. no encoding).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(image, gamma=gamma)
    return np.rint(processed * 255.0).astype(np.uint8)


def save_png(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a linear image as an 8-bit RGB PNG file.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 1.0).
    """
    image_uint8 = image_to_uint8(image, gamma=gamma)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def downsample_box(
    image: npt.NDArray[np.floating[npt.NBitBase]],
    factor: int,
) -> npt.NDArray[np.float32]:
    """Average non-overlapping ``factor x factor`` pixel blocks.

    Args:
        image: Image array of shape (H, W, 3); H and W must be multiples of
            ``factor``.
        factor: Block size.

    Returns:
        Image of shape (H // factor, W // factor, 3).

    Raises:
        ValueError: If the image size is not a multiple of factor.
    """
    height, width = image.shape[:2]
    if height % factor or width % factor:
        raise ValueError(f"Image size {width}x{height} is not a multiple of {factor}")

    blocks = image.reshape(height // factor, factor, width // factor, factor, -1)
    return blocks.mean(axis=(1, 3)).astype(np.float32)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
