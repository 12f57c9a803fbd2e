"""
Compositor.

The background is stretched to the canvas size and every overlay is
alpha-composited at its document coordinates, in the given order. Later
overlays draw on top of earlier ones.
"""

import io
import logging
import os
from typing import Iterable, Tuple, Union

from PIL import Image

from psd_compose.errors import EncodingError, NotFoundError

logger = logging.getLogger(__name__)

Overlay = Tuple[Image.Image, int, int]


def load_background(
    background: Union[str, os.PathLike, Image.Image], size: Tuple[int, int]
) -> Image.Image:
    """
    Load the background and stretch it to ``size``.

    :param background: image path or PIL Image.
    :param size: (width, height) of the canvas.
    :return: RGBA PIL Image of exactly ``size``.
    :raise NotFoundError: the background file does not exist.
    :raise EncodingError: the background cannot be decoded or resized.
    """
    if isinstance(background, Image.Image):
        image = background
    else:
        if not os.path.isfile(background):
            raise NotFoundError("Background not found: %s" % os.fspath(background))
        try:
            with Image.open(background) as f:
                f.load()
                image = f.copy()
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise EncodingError("Cannot decode background %s: %s" % (background, e)) from e

    try:
        image = image.convert("RGBA")
        if image.size != tuple(size):
            logger.debug("resizing background %s -> %s", image.size, size)
            image = image.resize(tuple(size), Image.Resampling.LANCZOS)
    except (OSError, ValueError) as e:
        raise EncodingError("Cannot resize background: %s" % e) from e
    return image


def composite(
    background: Union[str, os.PathLike, Image.Image],
    size: Tuple[int, int],
    overlays: Iterable[Overlay] = (),
) -> Image.Image:
    """
    Composite overlays over the background.

    :param background: image path or PIL Image, stretched to ``size``.
    :param size: (width, height) of the canvas.
    :param overlays: iterable of ``(image, left, top)`` tuples.
    :return: RGBA PIL Image of exactly ``size``.
    """
    result = load_background(background, size)
    for image, left, top in overlays:
        # paste() clips at the canvas edges, alpha_composite() does not.
        layer = Image.new("RGBA", result.size, (0, 0, 0, 0))
        layer.paste(image.convert("RGBA"), (int(left), int(top)))
        result = Image.alpha_composite(result, layer)
        logger.debug("composited overlay %s at (%d, %d)", image.size, left, top)
    return result


def encode_png(image: Image.Image, compress_level: int = 6) -> bytes:
    """
    Encode the image as PNG bytes.

    The output carries no timestamp or other metadata, so identical images
    encode to identical bytes.

    :raise EncodingError: the image cannot be encoded.
    """
    with io.BytesIO() as f:
        try:
            image.save(f, format="PNG", compress_level=compress_level)
        except (OSError, ValueError) as e:
            raise EncodingError("Cannot encode PNG: %s" % e) from e
        return f.getvalue()
