"""
PIL IO module.

Converts the composite preview stored in the image data section into a PIL
Image. Only 8-bit RGB and grayscale documents are supported.
"""

import logging
from typing import Optional

import numpy as np
from PIL import Image

from psd_compose.constants import ColorMode
from psd_compose.errors import EncodingError

logger = logging.getLogger(__name__)

EXPECTED_CHANNELS = {
    ColorMode.GRAYSCALE: 1,
    ColorMode.RGB: 3,
}


def _parse_array(data: bytes, depth: int) -> np.ndarray:
    if depth == 8:
        return np.frombuffer(data, ">u1")
    raise ValueError("Unsupported depth: %g" % depth)


def _remove_background(data: np.ndarray, color_channels: int) -> np.ndarray:
    """ImageData preview is rendered on a white background."""
    color = data[:, :, :color_channels].astype(np.float32) / 255.0
    alpha = data[:, :, color_channels : color_channels + 1].astype(np.float32) / 255.0
    a = np.repeat(alpha, color_channels, axis=2)
    mask = a > 0
    color[mask] = (color + a - 1)[mask] / a[mask]
    color = np.clip(color, 0.0, 1.0)
    result = np.concatenate([color, alpha], axis=2)
    return np.round(result * 255.0).astype(np.uint8)


def convert_image_data_to_pil(document) -> Optional[Image.Image]:
    """
    Convert the composite preview of the document to an RGBA PIL Image.

    :param document: :py:class:`~psd_compose.api.document.Document` loaded
        with ``skip_image_data=False``.
    :return: PIL Image, or `None` when the preview was not loaded.
    :raise EncodingError: the preview cannot be decoded.
    """
    image_data = document.image_data
    if image_data is None:
        return None

    color_channels = EXPECTED_CHANNELS.get(document.color_mode)
    if color_channels is None or document.depth != 8:
        raise EncodingError(
            "Unsupported preview: color mode %s, depth %d"
            % (document.color_mode.name, document.depth)
        )

    try:
        channels = image_data.get_data(document.header)
        array = _parse_array(b"".join(channels), document.depth)
        array = array.reshape((-1, document.height, document.width)).transpose((1, 2, 0))
    except ValueError as e:
        raise EncodingError("Cannot decode composite preview: %s" % e) from e

    if array.shape[2] > color_channels:
        array = _remove_background(array, color_channels)
    else:
        array = array[:, :, :color_channels]
    if array.shape[2] == 1:
        array = array[:, :, 0]
    # The mode (L, LA, RGB or RGBA) follows from the uint8 array shape.
    image = Image.fromarray(np.ascontiguousarray(array))
    logger.debug("decoded composite preview %s %s", image.mode, array.shape)
    return image.convert("RGBA")
