"""
Tagged blocks of layer records and of the layer and mask section.

A block is a signature, a four-character key and a length-prefixed payload.
Only the keys needed to rebuild the layer tree and read type layers are
decoded; the payload of any other key stays as `bytes`::

    setting = record.tagged_blocks.get_data(Tag.TYPE_TOOL_OBJECT_SETTING)
    if setting is not None:
        print(setting.text)
"""

import logging
from typing import Any, BinaryIO, Optional

from attrs import define, field

from psd_compose.constants import SectionDivider, Tag
from psd_compose.psd.base import (
    BaseElement,
    DictElement,
    IntegerElement,
    StringElement,
    ValueElement,
)
from psd_compose.psd.bin_utils import (
    is_readable,
    read_fmt,
    read_length_block,
    trimmed_repr,
)
from psd_compose.psd.descriptor import DescriptorBlock
from psd_compose.psd.engine_data import EngineData
from psd_compose.registry import new_registry
from psd_compose.validators import in_

logger = logging.getLogger(__name__)

TYPES, register = new_registry()
TYPES[Tag.LAYER_ID] = IntegerElement
TYPES[Tag.UNICODE_LAYER_NAME] = StringElement

_SIGNATURES = (b"8BIM", b"8B64")

# Keys with a 64-bit length in PSB files.
_BIG_KEYS = frozenset(
    [
        Tag.LAYER,
        Tag.LAYER_16,
        Tag.LAYER_32,
        Tag.USER_MASK,
        Tag.ALPHA,
        Tag.FILTER_MASK,
        Tag.FILTER_EFFECTS1,
        Tag.FILTER_EFFECTS2,
        Tag.FILTER_EFFECTS3,
        Tag.SAVING_MERGED_TRANSPARENCY,
        Tag.SAVING_MERGED_TRANSPARENCY16,
        Tag.SAVING_MERGED_TRANSPARENCY32,
        Tag.LINKED_LAYER2,
        Tag.LINKED_LAYER3,
        Tag.LINKED_LAYER_EXTERNAL,
        Tag.PIXEL_SOURCE_DATA2,
        Tag.UNICODE_PATH_NAME,
        Tag.EXPORT_SETTING1,
        Tag.EXPORT_SETTING2,
        Tag.COMPOSITOR_INFO,
        Tag.ARTBOARD_DATA2,
    ]
)


@define(repr=False)
class TaggedBlocks(DictElement):
    """
    Tagged blocks keyed by their four-character code. Lookup accepts a
    :py:class:`~psd_compose.constants.Tag` or the raw `bytes` key::

        Tag.LAYER_ID in tagged_blocks
        b'lyid' in tagged_blocks
    """

    def get_data(self, key: Any, default: Any = None) -> Any:
        """
        Decoded payload of ``key``, unwrapping plain values, or ``default``.
        """
        block = self.get(key)
        if block is None:
            return default
        if isinstance(block.data, ValueElement):
            return block.data.value
        return block.data

    @classmethod
    def read(
        cls,
        fp: BinaryIO,
        version: int = 1,
        padding: int = 1,
        end_pos: Optional[int] = None,
        **kwargs: Any,
    ) -> "TaggedBlocks":
        items = []
        # A block needs at least a signature and a key.
        while is_readable(fp, 8):
            if end_pos is not None and fp.tell() >= end_pos:
                break
            block = TaggedBlock.read(fp, version, padding)
            if block is None:
                break
            items.append((cls._key_converter(block.key), block))
        return cls(items)  # type: ignore[call-arg]

    @classmethod
    def _key_converter(cls, key: Any) -> Any:
        return key.value if isinstance(key, Tag) else key


@define(repr=False)
class TaggedBlock(BaseElement):
    """
    Single tagged block.

    .. py:attribute:: key

        :py:class:`~psd_compose.constants.Tag`, or `bytes` when unknown.

    .. py:attribute:: data

        Decoded payload, or the raw `bytes`.
    """

    signature: bytes = field(default=b"8BIM", repr=False, validator=in_(_SIGNATURES))
    key: Any = b""
    data: Any = b""

    @classmethod
    def read(
        cls,
        fp: BinaryIO,
        version: int = 1,
        padding: int = 1,
        **kwargs: Any,
    ) -> Optional["TaggedBlock"]:
        signature = read_fmt("4s", fp)[0]
        if signature not in _SIGNATURES:
            logger.warning("Invalid tagged block signature %r" % signature)
            fp.seek(-4, 1)
            return None

        key = read_fmt("4s", fp)[0]
        try:
            key = Tag(key)
        except ValueError:
            logger.debug("Unknown tagged block key %r" % key)
        big = version == 2 and key in _BIG_KEYS
        raw_data = read_length_block(fp, fmt="Q" if big else "I", padding=padding)
        return cls(signature, key, cls._decode(key, raw_data, version))

    @staticmethod
    def _decode(key: Any, raw_data: bytes, version: int) -> Any:
        kls = TYPES.get(key)
        if kls is None:
            logger.debug("Raw tagged block %r: %s" % (key, trimmed_repr(raw_data)))
            return raw_data
        try:
            return kls.frombytes(raw_data, version=version)
        except (OSError, ValueError) as e:
            logger.error("Failed to read tagged block %r: %s" % (key, e))
            return raw_data


@register(Tag.SECTION_DIVIDER_SETTING)
@register(Tag.NESTED_SECTION_DIVIDER_SETTING)
@define(repr=False)
class SectionDividerSetting(BaseElement):
    """
    Group boundary marker.

    .. py:attribute:: kind

        :py:class:`~psd_compose.constants.SectionDivider`.

    .. py:attribute:: blend_mode

        Group blend mode key, optional.

    .. py:attribute:: sub_type

        0 for a normal group, 1 for a scene group. Optional.
    """

    kind: SectionDivider = field(
        default=SectionDivider.OTHER, converter=SectionDivider, validator=in_(SectionDivider)
    )
    blend_mode: Optional[bytes] = None
    sub_type: Optional[int] = None

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "SectionDividerSetting":
        setting = cls(read_fmt("I", fp)[0])
        if is_readable(fp, 8):
            marker, setting.blend_mode = read_fmt("4s4s", fp)
            if marker != b"8BIM":
                raise ValueError("Invalid section divider signature %r" % marker)
        if is_readable(fp, 4):
            setting.sub_type = read_fmt("I", fp)[0]
        return setting


_IDENTITY = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


@register(Tag.TYPE_TOOL_OBJECT_SETTING)
@define(repr=False)
class TypeToolObjectSetting(BaseElement):
    """
    Type layer settings (``TySh``).

    .. py:attribute:: transform

        Affine transform ``(xx, xy, yx, yy, tx, ty)``.

    .. py:attribute:: text_data

        :py:class:`~psd_compose.psd.descriptor.DescriptorBlock` with the text
        under ``Txt `` and the decoded
        :py:class:`~psd_compose.psd.engine_data.EngineData` under
        ``EngineData``.

    .. py:attribute:: warp

        Warp :py:class:`~psd_compose.psd.descriptor.DescriptorBlock`, absent
        in some old files.

    .. py:attribute:: left
    .. py:attribute:: top
    .. py:attribute:: right
    .. py:attribute:: bottom

        Text bounds from the end of the block, zero when absent.
    """

    version: int = 1
    transform: tuple = _IDENTITY
    text_version: int = field(default=50, validator=in_((50,)))
    text_data: DescriptorBlock = field(factory=DescriptorBlock)
    warp: Optional[DescriptorBlock] = None
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "TypeToolObjectSetting":
        version, *transform = read_fmt("H6d", fp)
        setting = cls(
            version=version,
            transform=tuple(transform),
            text_version=read_fmt("H", fp)[0],
            text_data=DescriptorBlock.read(fp),
        )
        setting._decode_engine_data()
        if is_readable(fp, 2):
            read_fmt("H", fp)  # warp version
            setting.warp = DescriptorBlock.read(fp)
            if is_readable(fp, 16):
                setting.left, setting.top, setting.right, setting.bottom = read_fmt(
                    "4i", fp
                )
        return setting

    def _decode_engine_data(self) -> None:
        raw = self.text_data.get(b"EngineData")
        if not isinstance(raw, bytes):
            return
        try:
            self.text_data[b"EngineData"] = EngineData.frombytes(raw)
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning("Failed to read engine data: %s" % e)

    @property
    def text(self) -> str:
        """Plain text content, ``''`` when missing."""
        value = self.text_data.get(b"Txt ")
        return value if isinstance(value, str) else ""

    @property
    def engine_data(self) -> Optional[EngineData]:
        """Decoded EngineData, `None` when missing or unreadable."""
        value = self.text_data.get(b"EngineData")
        return value if isinstance(value, EngineData) else None


@register(Tag.TYPE_TOOL_INFO)
@define(repr=False)
class TypeToolInfo(BaseElement):
    """
    Legacy type tool info (``tySh``) of Photoshop 5.x files.

    Only the transform is decoded. Such a layer is still a type layer; its
    style falls back to the defaults.
    """

    version: int = 1
    transform: tuple = _IDENTITY
    data: bytes = b""

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "TypeToolInfo":
        version, *transform = read_fmt("H6d", fp)
        return cls(version, tuple(transform), fp.read())

    def __repr__(self) -> str:
        return "TypeToolInfo(version=%d, data=%s)" % (
            self.version,
            trimmed_repr(self.data),
        )
