"""
Descriptor reader.

Descriptors are Photoshop's generic key/value serialization. Type layers keep
their text and the raw ``EngineData`` markup in one::

    text_data = DescriptorBlock.frombytes(data)
    text = text_data['Txt ']
    engine_data = text_data['EngineData']

Values decode to plain Python objects where one fits:

- ``TEXT``: `str`
- ``long``, ``comp``: `int`
- ``doub``: `float`
- ``bool``: `bool`
- ``tdta``, ``alis``, ``Pth ``: `bytes`
- ``VlLs``: `list`
- ``Objc``, ``GlbO``, ``ObAr``: :py:class:`Descriptor`

Unit floats, enumerations and references keep their tags in small records.
Keys are `bytes`; `str` keys are encoded on lookup.
"""

import logging
from typing import Any, BinaryIO, Callable, Dict, Optional

from attrs import define, field

from psd_compose.constants import OSType
from psd_compose.errors import ParseError
from psd_compose.psd.base import DictElement
from psd_compose.psd.bin_utils import (
    read_exact,
    read_fmt,
    read_length_block,
    read_unicode_string,
)
from psd_compose.registry import new_registry

logger = logging.getLogger(__name__)

READERS, register = new_registry()


def read_length_and_key(fp: BinaryIO) -> bytes:
    """
    Read a descriptor key: a length followed by the bytes, where length 0
    means a 4-character code.
    """
    length = read_fmt("I", fp)[0]
    return read_exact(fp, length or 4)


def _ostype(fp: BinaryIO) -> OSType:
    code = read_exact(fp, 4)
    try:
        return OSType(code)
    except ValueError:
        raise ParseError("Unknown descriptor type %r" % code) from None


def read_value(fp: BinaryIO) -> Any:
    """Read an OSType-prefixed descriptor value."""
    ostype = _ostype(fp)
    reader: Optional[Callable[[BinaryIO], Any]] = READERS.get(ostype)
    if reader is None:
        raise ParseError("Unexpected descriptor type %s" % ostype.name)
    return reader(fp)


@define(frozen=True)
class UnitFloat:
    """
    Float with a unit, e.g. ``b'#Pnt'`` for points.
    """

    unit: bytes
    value: float

    def __float__(self) -> float:
        return self.value


@define(frozen=True)
class Enumerated:
    """
    Enumeration value.

    .. py:attribute:: type_id
    .. py:attribute:: enum
    """

    type_id: bytes
    enum: bytes


@define(frozen=True)
class Reference:
    """
    Class or reference item.

    .. py:attribute:: kind

        Reference :py:class:`~psd_compose.constants.OSType`.

    .. py:attribute:: value

        Payload of the item, depends on ``kind``.
    """

    kind: OSType
    name: str = ""
    class_id: bytes = b""
    value: Any = None


@define(repr=False)
class Descriptor(DictElement):
    """
    Dict-like descriptor structure.

    Example::

        for key, value in descriptor.items():
            print(key, value)

    .. py:attribute:: name

        `str`

    .. py:attribute:: classID

        `bytes`
    """

    name: str = ""
    classID: bytes = b"null"

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "Descriptor":
        return cls(**cls._read_body(fp))

    @classmethod
    def _read_body(cls, fp: BinaryIO) -> Dict[str, Any]:
        name = read_unicode_string(fp)
        class_id = read_length_and_key(fp)
        count = read_fmt("I", fp)[0]
        items = []
        for _ in range(count):
            key = read_length_and_key(fp)
            items.append((key, read_value(fp)))
        return dict(name=name, classID=class_id, items=items)

    @classmethod
    def _key_converter(cls, key: Any) -> bytes:
        if isinstance(key, str):
            return key.encode("ascii")
        return key

    def __repr__(self) -> str:
        return "%s(%r)%s" % (
            self.__class__.__name__,
            self.classID,
            dict.__repr__(self._items),
        )


@define(repr=False)
class DescriptorBlock(Descriptor):
    """
    :py:class:`Descriptor` preceded by a version number, as stored in tagged
    blocks.

    .. py:attribute:: version
    """

    version: int = field(default=16, kw_only=True)

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "DescriptorBlock":
        version = read_fmt("I", fp)[0]
        if version != 16:
            logger.warning("Unexpected descriptor version %d" % version)
        return cls(version=version, **cls._read_body(fp))


@register(OSType.DESCRIPTOR)
@register(OSType.GLOBAL_OBJECT)
def _read_descriptor(fp: BinaryIO) -> Descriptor:
    return Descriptor.read(fp)


@register(OSType.OBJECT_ARRAY)
def _read_object_array(fp: BinaryIO) -> Descriptor:
    read_fmt("I", fp)  # item count, repeated in the body
    return Descriptor.read(fp)


@register(OSType.LIST)
def _read_list(fp: BinaryIO) -> list:
    count = read_fmt("I", fp)[0]
    return [read_value(fp) for _ in range(count)]


@register(OSType.DOUBLE)
def _read_double(fp: BinaryIO) -> float:
    return read_fmt("d", fp)[0]


@register(OSType.UNIT_FLOAT)
def _read_unit_float(fp: BinaryIO) -> UnitFloat:
    unit, value = read_fmt("4sd", fp)
    return UnitFloat(unit, value)


@register(OSType.UNIT_FLOATS)
def _read_unit_floats(fp: BinaryIO) -> list:
    unit, count = read_fmt("4sI", fp)
    return [UnitFloat(unit, value) for value in read_fmt("%dd" % count, fp)]


@register(OSType.STRING)
def _read_string(fp: BinaryIO) -> str:
    return read_unicode_string(fp)


@register(OSType.ENUMERATED)
def _read_enumerated(fp: BinaryIO) -> Enumerated:
    type_id = read_length_and_key(fp)
    return Enumerated(type_id, read_length_and_key(fp))


@register(OSType.INTEGER)
def _read_integer(fp: BinaryIO) -> int:
    return read_fmt("i", fp)[0]


@register(OSType.LARGE_INTEGER)
def _read_large_integer(fp: BinaryIO) -> int:
    return read_fmt("q", fp)[0]


@register(OSType.BOOLEAN)
def _read_boolean(fp: BinaryIO) -> bool:
    return read_fmt("?", fp)[0]


@register(OSType.RAW_DATA)
@register(OSType.ALIAS)
@register(OSType.PATH)
def _read_raw_data(fp: BinaryIO) -> bytes:
    return read_length_block(fp)


def _class_reader(kind: OSType) -> Callable[[BinaryIO], Reference]:
    def read(fp: BinaryIO) -> Reference:
        name = read_unicode_string(fp)
        return Reference(kind, name, read_length_and_key(fp))

    return read


for _kind in (OSType.CLASS1, OSType.CLASS2):
    register(_kind)(_class_reader(_kind))


@register(OSType.REFERENCE)
def _read_reference(fp: BinaryIO) -> list:
    count = read_fmt("I", fp)[0]
    return [_read_reference_item(fp) for _ in range(count)]


def _read_reference_item(fp: BinaryIO) -> Reference:
    kind = _ostype(fp)
    if kind in (OSType.IDENTIFIER, OSType.INDEX):
        return Reference(kind, value=read_fmt("i", fp)[0])

    name = read_unicode_string(fp)
    class_id = read_length_and_key(fp)
    value: Any = None
    if kind == OSType.PROPERTY:
        value = read_length_and_key(fp)
    elif kind == OSType.ENUMERATED_REFERENCE:
        type_id = read_length_and_key(fp)
        value = Enumerated(type_id, read_length_and_key(fp))
    elif kind == OSType.OFFSET:
        value = read_fmt("I", fp)[0]
    elif kind == OSType.NAME:
        value = read_unicode_string(fp)
    elif kind != OSType.CLASS3:
        raise ParseError("Unexpected reference type %s" % kind.name)
    return Reference(kind, name, class_id, value)
