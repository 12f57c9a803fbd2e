"""
Base classes of the low-level structures.

Every structure in :py:mod:`psd_compose.psd` is an attrs_ class deriving from
:py:class:`BaseElement` and decodes itself through the ``read`` classmethod.
Nothing is ever written back.

.. _attrs: https://www.attrs.org/en/stable/index.html
"""

import io
import logging
from collections import OrderedDict
from typing import Any, BinaryIO, Iterator, TypeVar

from attrs import define, field

from psd_compose.psd.bin_utils import read_fmt, read_unicode_string, trimmed_repr

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseElement")


class BaseElement:
    """
    Decodable structure.

    .. py:classmethod:: read(cls, fp, **kwargs)

        Decode from a file-like object.

    .. py:classmethod:: frombytes(cls, data, **kwargs)

        Decode from bytes.
    """

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        raise NotImplementedError()

    @classmethod
    def frombytes(cls: type[T], data: bytes, *args: Any, **kwargs: Any) -> T:
        with io.BytesIO(data) as f:
            return cls.read(f, *args, **kwargs)


@define(repr=False, eq=False)
class ValueElement(BaseElement):
    """
    Wrapper of a single ``value``. Equality and hashing use the wrapped
    value, so ``IntegerElement(3) == 3``.
    """

    value: object = None

    def __eq__(self, other: Any) -> bool:
        return self.value == getattr(other, "value", other)

    def __hash__(self) -> int:
        return hash(self.value)

    def __bool__(self) -> bool:
        return bool(self.value)

    def __repr__(self) -> str:
        if isinstance(self.value, bytes):
            return trimmed_repr(self.value)
        return repr(self.value)


@define(repr=False, eq=False)
class NumericElement(ValueElement):
    """Double precision float, ``value`` is converted to `float`."""

    value: float = field(default=0.0, converter=float)

    def __int__(self) -> int:
        return int(self.value)

    def __float__(self) -> float:
        return float(self.value)

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        return cls(read_fmt("d", fp)[0])  # type: ignore[call-arg]


@define(repr=False, eq=False)
class IntegerElement(NumericElement):
    """Unsigned 32-bit integer."""

    value: int = field(default=0, converter=int)

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        return cls(read_fmt("I", fp)[0])  # type: ignore[call-arg]


@define(repr=False, eq=False)
class StringElement(ValueElement):
    """Length-prefixed UTF-16 string."""

    value: str = ""

    @classmethod
    def read(cls: type[T], fp: BinaryIO, padding: int = 1, **kwargs: Any) -> T:
        return cls(read_unicode_string(fp, padding=padding))  # type: ignore[call-arg]


@define(repr=False)
class DictElement(BaseElement):
    """
    Ordered mapping of ``items``. Subclasses normalize keys by overriding
    ``_key_converter``.
    """

    _items: OrderedDict = field(factory=OrderedDict, converter=OrderedDict)

    def get(self, key: Any, *args: Any) -> Any:
        return self._items.get(self._key_converter(key), *args)

    def items(self) -> Any:
        return self._items.items()

    def keys(self) -> Any:
        return self._items.keys()

    def values(self) -> Any:
        return self._items.values()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __getitem__(self, key: Any) -> Any:
        return self._items[self._key_converter(key)]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._items[self._key_converter(key)] = value

    def __contains__(self, key: Any) -> bool:
        return self._key_converter(key) in self._items

    def __repr__(self) -> str:
        return dict.__repr__(self._items)

    @classmethod
    def _key_converter(cls, key: Any) -> Any:
        return key
