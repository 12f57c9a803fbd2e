"""
Text rasterizer.

Replacement text is drawn once on a transparent canvas, anchored left,
centered or right, with the top of the glyphs pinned near the top edge.

Fonts are resolved by name through Pillow: first as given, then as
``<family>.ttf``, ``<family>.otf`` or ``<family>.ttc`` in the configured font
directories, and finally Pillow's bundled font at the requested size.
"""

import logging
import math
import os
from typing import Iterable, Tuple

from PIL import Image, ImageDraw, ImageFont

from psd_compose.api.style import ResolvedStyle
from psd_compose.composite.compositor import encode_png
from psd_compose.constants import Justification

logger = logging.getLogger(__name__)

FONT_EXTENSIONS = (".ttf", ".otf", ".ttc")


def load_font(family: str, size: int, font_dirs: Iterable[str] = ()) -> ImageFont.FreeTypeFont:
    """
    Resolve a font by name.

    :param family: font family or PostScript name.
    :param size: size in pixels.
    :param font_dirs: directories searched for font files.
    """
    candidates = [family]
    for font_dir in font_dirs:
        candidates.extend(os.path.join(font_dir, family + ext) for ext in FONT_EXTENSIONS)

    for candidate in candidates:
        try:
            font = ImageFont.truetype(candidate, size)
            logger.debug("resolved font %r to %s", family, candidate)
            return font
        except OSError:
            continue

    logger.debug("font %r not found, using the default font", family)
    return ImageFont.load_default(size=size)


def overlay_size(
    layer_width: int, layer_height: int, text: str, font_size: int
) -> Tuple[int, int]:
    """
    Canvas size for the replacement text of a layer.

    The layer box is widened to fit roughly ``0.6 * font_size`` per character
    and at least 100 pixels, and made at least ``1.8 * font_size`` tall.
    """
    width = max(layer_width, len(text) * font_size * 0.6, 100)
    height = max(layer_height, font_size * 1.8)
    return int(math.ceil(width)), int(math.ceil(height))


def rasterize_text(
    text: str,
    width: int,
    height: int,
    style: ResolvedStyle,
    font_dirs: Iterable[str] = (),
) -> Image.Image:
    """
    Draw ``text`` on a transparent RGBA canvas.

    :param text: text to draw. An empty string yields a blank canvas.
    :param width: canvas width, must be positive.
    :param height: canvas height, must be positive.
    :param style: :py:class:`~psd_compose.api.style.ResolvedStyle`.
    :param font_dirs: directories searched for font files.
    :raise ValueError: on non-positive dimensions.
    """
    if width <= 0 or height <= 0:
        raise ValueError("Invalid canvas size %dx%d" % (width, height))

    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    if not text:
        return image

    font = load_font(style.font_family, style.font_size, font_dirs)
    draw = ImageDraw.Draw(image)
    text_width = draw.textlength(text, font=font)
    if style.justification == Justification.CENTER:
        x = (width - text_width) / 2
    elif style.justification == Justification.RIGHT:
        x = width - text_width
    else:
        x = 0
    y = max(2, style.font_size * 0.1)
    draw.text((x, y), text, font=font, fill=style.fill)
    return image


def rasterize_text_png(
    text: str,
    width: int,
    height: int,
    style: ResolvedStyle,
    font_dirs: Iterable[str] = (),
) -> bytes:
    """Same as :py:func:`rasterize_text`, encoded as PNG bytes."""
    return encode_png(rasterize_text(text, width, height, style, font_dirs))
