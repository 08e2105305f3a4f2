"""Image handling: reachability probing for external image URLs."""

from .probe import ImageProbe, url_origin

__all__ = [
    "ImageProbe",
    "url_origin",
]
