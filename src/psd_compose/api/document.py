"""
Document module.

:py:class:`Document` wraps the low-level :py:class:`~psd_compose.psd.PSD`
structure and reconstructs the layer tree from the flat layer record list.

Example usage::

    from psd_compose import Document

    doc = Document.open('card.psd')
    print(f"Size: {doc.width}x{doc.height}")

    for node in doc.descendants():
        print(f"{node.kind.value}: {node.name} {node.bounds}")
"""

import io
import logging
import os
import struct
from typing import Any, BinaryIO, Iterator, List, Optional, Tuple, Union

from attrs import define, field

from psd_compose.api.layers import GroupNode, LayerNode, OtherNode, TextNode
from psd_compose.api.typesetting import TypeSetting
from psd_compose.constants import ColorMode, SectionDivider, Tag
from psd_compose.errors import NotFoundError, ParseError
from psd_compose.psd import PSD
from psd_compose.psd.header import FileHeader
from psd_compose.psd.image_data import ImageData
from psd_compose.psd.layer_and_mask import LayerRecord
from psd_compose.psd.tagged_blocks import TypeToolObjectSetting

logger = logging.getLogger(__name__)


@define(frozen=True)
class Document:
    """
    Parsed PSD/PSB document.

    .. py:attribute:: width
    .. py:attribute:: height

        Canvas size in pixels.

    .. py:attribute:: children

        Tuple of top-level :py:class:`~psd_compose.api.layers.LayerNode`,
        bottom-most first.

    .. py:attribute:: depth
    .. py:attribute:: channels
    .. py:attribute:: color_mode
    .. py:attribute:: version

        1 for PSD, 2 for PSB.
    """

    width: int
    height: int
    children: Tuple[LayerNode, ...] = field(default=(), converter=tuple, repr=False)
    depth: int = 8
    channels: int = 3
    color_mode: ColorMode = ColorMode.RGB
    version: int = 1
    _image_data: Optional[ImageData] = field(default=None, repr=False)

    @classmethod
    def open(
        cls, fp: Union[BinaryIO, str, os.PathLike], **kwargs: Any
    ) -> "Document":
        """
        Open a PSD document.

        :param fp: filename or file-like object.
        :param skip_image_data: skip the composite preview,
            default `True`.
        :param encoding: charset encoding of the pascal string within the file,
            default 'macroman'.
        :return: A :py:class:`Document` object.
        :raise NotFoundError: the file does not exist or cannot be read.
        :raise ParseError: the file is not a valid PSD/PSB document.
        """
        if isinstance(fp, (str, os.PathLike)):
            try:
                f = open(fp, "rb")
            except OSError as e:
                raise NotFoundError("Cannot open document %s: %s" % (fp, e)) from e
            with f:
                return cls._read(f, **kwargs)
        return cls._read(fp, **kwargs)

    @classmethod
    def frombytes(cls, data: bytes, **kwargs: Any) -> "Document":
        """
        Read a PSD document from bytes.

        See :py:meth:`open` for keyword arguments.
        """
        with io.BytesIO(data) as f:
            return cls._read(f, **kwargs)

    @classmethod
    def _read(
        cls,
        fp: BinaryIO,
        skip_image_data: bool = True,
        encoding: str = "macroman",
    ) -> "Document":
        try:
            psd = PSD.read(fp, encoding=encoding, skip_image_data=skip_image_data)
        except ParseError:
            raise
        except (ValueError, struct.error, UnicodeDecodeError) as e:
            raise ParseError(str(e)) from e
        except OSError as e:
            raise NotFoundError("Cannot read document: %s" % e) from e
        return cls._from_psd(psd)

    @classmethod
    def _from_psd(cls, psd: PSD) -> "Document":
        header: FileHeader = psd.header
        layer_info = psd.layer_and_mask_information.get_layer_info()
        records = list(layer_info.layer_records) if layer_info else []
        children = _build_tree(records)
        logger.debug(
            "loaded document %dx%d with %d records" % (header.width, header.height, len(records))
        )
        return cls(
            width=header.width,
            height=header.height,
            children=children,
            depth=header.depth,
            channels=header.channels,
            color_mode=header.color_mode,
            version=header.version,
            image_data=psd.image_data,
        )

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    @property
    def image_data(self) -> Optional[ImageData]:
        """Composite preview section, `None` when image data was skipped."""
        return self._image_data

    @property
    def header(self) -> FileHeader:
        """File header rebuilt from the document attributes."""
        return FileHeader(
            version=self.version,
            channels=self.channels,
            height=self.height,
            width=self.width,
            depth=self.depth,
            color_mode=self.color_mode,
        )

    def descendants(self) -> Iterator[LayerNode]:
        """
        Return a generator to iterate over all descendant layers in
        pre-order: each node is followed by its own descendants.

        Example::

            for node in doc.descendants():
                print(node)
        """
        stack: List[LayerNode] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, GroupNode):
                stack.extend(reversed(node.children))

    def __iter__(self) -> Iterator[LayerNode]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)


def flatten(document: Document) -> List[LayerNode]:
    """
    Flatten the layer tree of the document into a pre-order list, root
    excluded.
    """
    return list(document.descendants())


def _build_tree(records: List[LayerRecord]) -> Tuple[LayerNode, ...]:
    # Groups are opened by a bounding divider record and closed by the record
    # that carries the group name; the group takes the slot of its divider.
    stack: List[List[Optional[LayerNode]]] = [[]]
    slots: List[Tuple[List[Optional[LayerNode]], int, LayerRecord]] = []

    for record in records:
        blocks = record.tagged_blocks
        divider = blocks.get_data(Tag.SECTION_DIVIDER_SETTING, None)
        divider = blocks.get_data(Tag.NESTED_SECTION_DIVIDER_SETTING, divider)
        kind = getattr(divider, "kind", SectionDivider.OTHER)

        if kind == SectionDivider.BOUNDING_SECTION_DIVIDER:
            stack[-1].append(None)
            slots.append((stack[-1], len(stack[-1]) - 1, record))
            stack.append([])
        elif kind in (SectionDivider.OPEN_FOLDER, SectionDivider.CLOSED_FOLDER):
            if not slots:
                logger.warning("Group end without a start: %r" % _layer_name(record))
                stack[-1].append(_make_node(record))
                continue
            children = stack.pop()
            parent, index, _ = slots.pop()
            parent[index] = GroupNode(
                children=[c for c in children if c is not None], **_common(record)
            )
        else:
            stack[-1].append(_make_node(record))

    while slots:
        logger.warning("Unterminated group found, closing it")
        children = stack.pop()
        parent, index, record = slots.pop()
        parent[index] = GroupNode(
            children=[c for c in children if c is not None], **_common(record)
        )

    return tuple(c for c in stack[0] if c is not None)


def _layer_name(record: LayerRecord) -> str:
    return record.tagged_blocks.get_data(Tag.UNICODE_LAYER_NAME, record.name) or ""


def _common(record: LayerRecord) -> dict:
    layer_id = record.tagged_blocks.get_data(Tag.LAYER_ID)
    return dict(
        name=_layer_name(record),
        left=record.left,
        top=record.top,
        right=record.right,
        bottom=record.bottom,
        visible=record.flags.visible,
        layer_id=layer_id if isinstance(layer_id, int) else None,
    )


def _make_node(record: LayerRecord) -> LayerNode:
    blocks = record.tagged_blocks
    if Tag.TYPE_TOOL_OBJECT_SETTING in blocks:
        setting = blocks.get_data(Tag.TYPE_TOOL_OBJECT_SETTING)
        if not isinstance(setting, TypeToolObjectSetting):
            logger.debug("Unreadable type tool data in %r" % _layer_name(record))
            return TextNode(**_common(record))
        text = setting.text
        engine_data = setting.engine_data
        if engine_data is None:
            return TextNode(text=text, **_common(record))
        try:
            typesetting = TypeSetting(text, engine_data)
        except (AttributeError, IndexError, TypeError, ValueError) as e:
            logger.warning("Failed to read text style of %r: %s" % (_layer_name(record), e))
            return TextNode(text=text, **_common(record))
        return TextNode(
            text=text,
            runs=typesetting.runs,
            paragraph_justification=typesetting.paragraph_justification,
            **_common(record),
        )
    elif Tag.TYPE_TOOL_INFO in blocks:
        return TextNode(**_common(record))
    return OtherNode(**_common(record))
