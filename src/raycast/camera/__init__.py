"""Camera module: a fixed pinhole sensor at the origin looking down -z."""

from .sensor import (
    JITTER_TABLE,
    PIXEL_CENTER,
    Sensor,
    fov_adjustment,
    primary_ray,
    primary_rays_batch,
    sensor_params,
)

__all__ = [
    "JITTER_TABLE",
    "PIXEL_CENTER",
    "Sensor",
    "fov_adjustment",
    "primary_ray",
    "primary_rays_batch",
    "sensor_params",
]
