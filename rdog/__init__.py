"""Per-pixel CPU shading passes for a signed-distance-field scene with sky and clouds."""

__version__ = "0.1.0"

__all__ = [
    "atmosphere",
    "buffers",
    "camera",
    "config",
    "controllers",
    "direct",
    "frame",
    "raster",
    "rng",
    "scatter",
    "scene",
    "sdf",
    "specular",
    "texture",
    "trace",
    "vecmath",
]