"""Preview and export of rendered images.

Components:
    display: Clamping, gamma and Matplotlib previews
    export: 8-bit conversion, PNG output and image comparison helpers
"""

from .display import apply_gamma, process_image_for_display, show_comparison, show_preview
from .export import compute_rmse, downsample_box, image_to_uint8, save_png

__all__ = [
    "apply_gamma",
    "compute_rmse",
    "downsample_box",
    "image_to_uint8",
    "process_image_for_display",
    "save_png",
    "show_comparison",
    "show_preview",
]
