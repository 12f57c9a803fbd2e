"""
Composite module for text rendering and layering.

Key modules:

- :py:mod:`psd_compose.composite.text`: Replacement text rasterization
- :py:mod:`psd_compose.composite.compositor`: Background loading, overlay
  compositing and PNG encoding

Example usage::

    from psd_compose.composite import composite, encode_png, rasterize_text

    overlay = rasterize_text('Jordan', 300, 60, style)
    image = composite('background.png', (800, 600), [(overlay, 40, 20)])
    data = encode_png(image)
"""

from psd_compose.composite.compositor import composite, encode_png, load_background
from psd_compose.composite.text import (
    load_font,
    overlay_size,
    rasterize_text,
    rasterize_text_png,
)

__all__ = [
    "composite",
    "encode_png",
    "load_background",
    "load_font",
    "overlay_size",
    "rasterize_text",
    "rasterize_text_png",
]
