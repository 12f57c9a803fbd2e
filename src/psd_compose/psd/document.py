"""
Top-level PSD/PSB file structure.
"""

import logging
from typing import Any, BinaryIO, Optional

from attrs import define, field

from psd_compose.errors import ParseError
from psd_compose.psd.base import BaseElement
from psd_compose.psd.bin_utils import is_readable, skip_length_block
from psd_compose.psd.header import FileHeader
from psd_compose.psd.image_data import ImageData
from psd_compose.psd.layer_and_mask import LayerAndMaskInformation

logger = logging.getLogger(__name__)


@define(repr=False)
class PSD(BaseElement):
    """
    Low-level PSD file structure following the Adobe file format
    documentation_.

    .. _documentation: https://www.adobe.com/devnet-apps/photoshop/fileformatashtml/

    Example::

        from psd_compose.psd import PSD

        with open(input_file, 'rb') as f:
            psd = PSD.read(f, skip_image_data=True)

    Color mode data and image resources are skipped.

    .. py:attribute:: header

        :py:class:`~psd_compose.psd.header.FileHeader`.

    .. py:attribute:: layer_and_mask_information

        :py:class:`~psd_compose.psd.layer_and_mask.LayerAndMaskInformation`.

    .. py:attribute:: image_data

        Composite preview, :py:class:`~psd_compose.psd.image_data.ImageData`.
        `None` when read with ``skip_image_data=True``; the compression marker
        must still be present.
    """

    header: FileHeader = field(factory=FileHeader)
    layer_and_mask_information: LayerAndMaskInformation = field(
        factory=LayerAndMaskInformation
    )
    image_data: Optional[ImageData] = None

    @classmethod
    def read(
        cls,
        fp: BinaryIO,
        encoding: str = "macroman",
        skip_image_data: bool = False,
        **kwargs: Any,
    ) -> "PSD":
        header = FileHeader.read(fp)
        logger.debug("read %s" % header)
        for section in ("color mode data", "image resources"):
            length = skip_length_block(fp)
            logger.debug("skipped %s, len=%d" % (section, length))
        layer_and_mask_information = LayerAndMaskInformation.read(
            fp, encoding, header.version
        )
        image_data = None
        if not skip_image_data:
            image_data = ImageData.read(fp)
        elif not is_readable(fp, 2):
            raise ParseError("Truncated data: missing image data section")
        return cls(header, layer_and_mask_information, image_data)
