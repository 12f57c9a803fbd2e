"""
Image data section, the composite preview stored at the end of the file.
"""

import logging
from typing import Any, BinaryIO, List

from attrs import define, field

from psd_compose import compression
from psd_compose.constants import Compression
from psd_compose.psd.base import BaseElement
from psd_compose.psd.bin_utils import read_fmt, trimmed_repr
from psd_compose.psd.header import FileHeader
from psd_compose.validators import in_

logger = logging.getLogger(__name__)


@define(repr=False)
class ImageData(BaseElement):
    """
    Compressed composite preview, all channel planes one after another.

    .. py:attribute:: compression

        :py:class:`~psd_compose.constants.Compression`.

    .. py:attribute:: data
    """

    compression: Compression = field(
        default=Compression.RAW, converter=Compression, validator=in_(Compression)
    )
    data: bytes = b""

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "ImageData":
        method = read_fmt("H", fp)[0]
        data = fp.read()
        logger.debug("read image data, %d bytes" % len(data))
        return cls(method, data)

    def get_data(self, header: FileHeader) -> List[bytes]:
        """
        Decompress into one `bytes` plane per channel.

        :raise ValueError: the data is corrupt.
        """
        planes = compression.decompress(
            self.data,
            self.compression,
            header.width,
            header.height * header.channels,
            header.depth,
            header.version,
        )
        size = len(planes) // header.channels
        return [planes[i * size : (i + 1) * size] for i in range(header.channels)]

    def __repr__(self) -> str:
        return "ImageData(compression=%s, data=%s)" % (
            self.compression.name,
            trimmed_repr(self.data),
        )
