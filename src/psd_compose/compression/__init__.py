"""
Decompression of the composite preview stored in the image data section.

RAW, PackBits RLE, ZIP and ZIP with prediction are handled::

    planes = decompress(data, Compression.RLE, width, height * channels, 8)
"""

import array
import io
import logging
import zlib

from psd_compose.compression import rle
from psd_compose.constants import Compression
from psd_compose.psd.bin_utils import read_be_array

logger = logging.getLogger(__name__)


def decompress(
    data: bytes,
    compression: Compression,
    width: int,
    height: int,
    depth: int,
    version: int = 1,
) -> bytes:
    """
    Decompress pixel rows.

    :param height: number of rows, all channel planes included.
    :param version: 2 for PSB, where RLE row lengths are 32-bit.
    :raise ValueError: the data is corrupt or does not fill the rows.
    """
    expected = width * height * max(1, depth // 8)

    if compression == Compression.RAW:
        result = data[:expected]
    elif compression == Compression.RLE:
        result = decode_rle(data, width, height, depth, version)
    else:
        try:
            result = zlib.decompress(data)
        except zlib.error as e:
            raise ValueError("Invalid ZIP compression: %s" % e) from e
        if compression == Compression.ZIP_WITH_PREDICTION:
            result = decode_prediction(result, width, height, depth)

    if depth >= 8 and len(result) != expected:
        raise ValueError("Decompressed %d bytes, expected %d" % (len(result), expected))
    logger.debug("decompressed %s data, len=%d" % (compression.name, len(result)))
    return result


def decode_rle(data: bytes, width: int, height: int, depth: int, version: int) -> bytes:
    """Decode RLE rows, prefixed by the table of packed row lengths."""
    row_size = max(width * depth // 8, 1)
    with io.BytesIO(data) as fp:
        counts = read_be_array(("H", "I")[version - 1], height, fp)
        return b"".join(rle.decode(fp.read(count), row_size) for count in counts)


def decode_prediction(data: bytes, width: int, height: int, depth: int) -> bytes:
    """Undo the horizontal delta encoding of 8-bit rows."""
    if depth != 8:
        raise ValueError("Unsupported depth for prediction: %d" % depth)
    pixels = array.array("B", data)
    for start in range(0, width * height, width):
        for pos in range(start + 1, start + width):
            pixels[pos] = (pixels[pos] + pixels[pos - 1]) & 0xFF
    return pixels.tobytes()
