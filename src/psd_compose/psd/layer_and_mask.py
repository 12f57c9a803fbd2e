"""
Layer and mask information section.

The section holds a flat list of layer records, bottom-most first. Groups are
not nested in the file; they are delimited by records carrying a section
divider tagged block:

- ``BOUNDING_SECTION_DIVIDER`` opens a group, below its contents
- ``OPEN_FOLDER`` or ``CLOSED_FOLDER`` closes it and carries the group name

:py:mod:`psd_compose.api.document` turns the list back into a tree.

Only record metadata is decoded. Layer masks and blending ranges are skipped,
and so is the per-layer channel pixel data: replacement text is drawn from the
resolved style, never from layer pixels. 16 and 32-bit documents keep their
records in the ``Lr16`` or ``Lr32`` global tagged block instead::

    layer_info = psd.layer_and_mask_information.get_layer_info()
    for record in layer_info.layer_records:
        print(record.name, record.left, record.top, record.right, record.bottom)
"""

import io
import logging
from typing import Any, BinaryIO, List, Optional

from attrs import define, field

from psd_compose.constants import Tag
from psd_compose.psd.base import BaseElement
from psd_compose.psd.bin_utils import (
    is_readable,
    read_fmt,
    read_length_block,
    read_pascal_string,
    seek_exact,
    skip_length_block,
)
from psd_compose.psd.tagged_blocks import TaggedBlocks, register
from psd_compose.validators import in_

logger = logging.getLogger(__name__)


def _length_format(version: int) -> str:
    return ("I", "Q")[version - 1]


@define(repr=False)
class LayerAndMaskInformation(BaseElement):
    """
    Layer and mask information section.

    .. py:attribute:: layer_info

        :py:class:`LayerInfo`, `None` when the section is empty.

    .. py:attribute:: tagged_blocks

        Global :py:class:`~psd_compose.psd.tagged_blocks.TaggedBlocks`.
    """

    layer_info: Optional["LayerInfo"] = None
    tagged_blocks: Optional[TaggedBlocks] = None

    @classmethod
    def read(
        cls,
        fp: BinaryIO,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> "LayerAndMaskInformation":
        length = read_fmt(_length_format(version), fp)[0]
        end_pos = fp.tell() + length
        logger.debug("reading layer and mask info, len=%d" % length)
        if length == 0:
            return cls()

        layer_info = LayerInfo.read(fp, encoding, version)
        if is_readable(fp, 4) and fp.tell() < end_pos:
            skipped = skip_length_block(fp)
            logger.debug("skipped global layer mask info, len=%d" % skipped)

        tagged_blocks = None
        if is_readable(fp) and fp.tell() < end_pos:
            # Global tagged blocks are padded to 4 bytes.
            tagged_blocks = TaggedBlocks.read(
                fp, version=version, padding=4, end_pos=end_pos
            )

        if fp.tell() > end_pos:
            logger.warning(
                "Layer and mask section overrun: at %d, expected %d"
                % (fp.tell(), end_pos)
            )
        seek_exact(fp, end_pos - fp.tell())
        return cls(layer_info, tagged_blocks)

    def get_layer_info(self) -> Optional["LayerInfo"]:
        """
        Layer info holding the records, from the ``Lr16`` or ``Lr32`` block
        when present.
        """
        if self.tagged_blocks is not None:
            for key in (Tag.LAYER_16, Tag.LAYER_32):
                data = self.tagged_blocks.get_data(key)
                if isinstance(data, LayerInfo):
                    return data
        return self.layer_info


@define(repr=False)
class LayerInfo(BaseElement):
    """
    Layer records.

    .. py:attribute:: layer_count

        Record count. A negative count means the first alpha channel holds the
        transparency of the merged result; its absolute value is used.

    .. py:attribute:: layer_records

        List of :py:class:`LayerRecord`, bottom-most first.
    """

    layer_count: int = 0
    layer_records: List["LayerRecord"] = field(factory=list)

    @classmethod
    def read(
        cls,
        fp: BinaryIO,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> "LayerInfo":
        length = read_fmt(_length_format(version), fp)[0]
        logger.debug("reading layer info, len=%d" % length)
        if length == 0:
            return cls()
        end_pos = fp.tell() + length
        self = cls._read_body(fp, encoding, version)
        seek_exact(fp, end_pos - fp.tell())
        return self

    @classmethod
    def _read_body(cls, fp: BinaryIO, encoding: str, version: int) -> "LayerInfo":
        layer_count = read_fmt("h", fp)[0]
        records = [
            LayerRecord.read(fp, encoding, version) for _ in range(abs(layer_count))
        ]
        channel_bytes = sum(c.length for r in records for c in r.channel_info)
        seek_exact(fp, channel_bytes)
        logger.debug(
            "  read %d layer records, skipped %d bytes of channel data"
            % (len(records), channel_bytes)
        )
        return cls(layer_count=layer_count, layer_records=records)


@register(Tag.LAYER_16)
@register(Tag.LAYER_32)
@define(repr=False)
class LayerInfoBlock(LayerInfo):
    """
    :py:class:`LayerInfo` stored in the ``Lr16`` or ``Lr32`` tagged block,
    without the leading length.
    """

    @classmethod
    def read(
        cls,
        fp: BinaryIO,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> "LayerInfo":
        return cls._read_body(fp, encoding, version)


@define(repr=False)
class ChannelInfo(BaseElement):
    """
    Channel id and the length of its data, compression marker included.
    """

    id: int = 0
    length: int = 0

    @classmethod
    def read(cls, fp: BinaryIO, version: int = 1, **kwargs: Any) -> "ChannelInfo":
        channel_id, length = read_fmt("h" + _length_format(version), fp)
        return cls(id=channel_id, length=length)


@define(repr=False)
class LayerFlags(BaseElement):
    """
    Layer flags.

    .. py:attribute:: transparency_protected
    .. py:attribute:: visible
    .. py:attribute:: pixel_data_irrelevant
    """

    transparency_protected: bool = False
    visible: bool = True
    pixel_data_irrelevant: bool = False

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "LayerFlags":
        flags = read_fmt("B", fp)[0]
        return cls(
            transparency_protected=bool(flags & 1),
            visible=not flags & 2,
            pixel_data_irrelevant=bool(flags & 16),
        )


@define(repr=False)
class LayerRecord(BaseElement):
    """
    Layer record.

    .. py:attribute:: top
    .. py:attribute:: left
    .. py:attribute:: bottom
    .. py:attribute:: right

        Bounding box, may be empty or inverted.

    .. py:attribute:: channel_info

        List of :py:class:`ChannelInfo`.

    .. py:attribute:: blend_mode

        Blend mode key, e.g. ``b'norm'``.

    .. py:attribute:: opacity
    .. py:attribute:: flags

        :py:class:`LayerFlags`.

    .. py:attribute:: name

        Pascal string name. The ``luni`` tagged block holds the unicode name.

    .. py:attribute:: tagged_blocks

        :py:class:`~psd_compose.psd.tagged_blocks.TaggedBlocks`.
    """

    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0
    channel_info: List[ChannelInfo] = field(factory=list)
    signature: bytes = field(default=b"8BIM", repr=False, validator=in_((b"8BIM",)))
    blend_mode: bytes = b"norm"
    opacity: int = 255
    flags: LayerFlags = field(factory=LayerFlags)
    name: str = ""
    tagged_blocks: TaggedBlocks = field(factory=TaggedBlocks)

    @classmethod
    def read(
        cls,
        fp: BinaryIO,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> "LayerRecord":
        top, left, bottom, right, num_channels = read_fmt("4iH", fp)
        channel_info = [ChannelInfo.read(fp, version) for _ in range(num_channels)]
        signature, blend_mode, opacity, _clipping = read_fmt("4s4sBB", fp)
        flags = LayerFlags.read(fp)

        extra = read_length_block(fp, fmt="xI")
        with io.BytesIO(extra) as f:
            skip_length_block(f)  # layer mask
            skip_length_block(f)  # blending ranges
            name = read_pascal_string(f, encoding, padding=4)
            tagged_blocks = TaggedBlocks.read(f, version=version, padding=1)
        logger.debug("  read layer record %r" % name)

        return cls(
            top=top,
            left=left,
            bottom=bottom,
            right=right,
            channel_info=channel_info,
            signature=signature,
            blend_mode=blend_mode,
            opacity=opacity,
            flags=flags,
            name=name,
            tagged_blocks=tagged_blocks,
        )

    @property
    def width(self) -> int:
        """Width, never negative."""
        return max(self.right - self.left, 0)

    @property
    def height(self) -> int:
        """Height, never negative."""
        return max(self.bottom - self.top, 0)
