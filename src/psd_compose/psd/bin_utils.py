"""
Binary reading helpers.

Numbers in PSD/PSB files are big-endian. Short reads raise
:py:class:`~psd_compose.errors.ParseError`, naming the offset where the
stream ran out.
"""

import array
import struct
import sys
from typing import Any, BinaryIO, Tuple

from psd_compose.errors import ParseError


def read_exact(fp: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes."""
    data = fp.read(size)
    if len(data) != size:
        raise ParseError(
            "Truncated data: expected %d bytes, got %d at offset %d"
            % (size, len(data), fp.tell())
        )
    return data


def read_fmt(fmt: str, fp: BinaryIO) -> Tuple[Any, ...]:
    """Read and unpack a big-endian :py:mod:`struct` format."""
    fmt = ">" + fmt
    return struct.unpack(fmt, read_exact(fp, struct.calcsize(fmt)))


def pad(number: int, divisor: int) -> int:
    """Round ``number`` up to a multiple of ``divisor``."""
    return -(-number // divisor) * divisor


def read_padding(fp: BinaryIO, size: int, divisor: int = 2) -> bytes:
    """Consume the bytes aligning a block of ``size`` bytes to ``divisor``."""
    return fp.read(pad(size, divisor) - size)


def read_length_block(fp: BinaryIO, fmt: str = "I", padding: int = 1) -> bytes:
    """
    Read a block prefixed by its length.

    :param fmt: format of the length marker, ``'Q'`` for 64-bit lengths.
    :param padding: alignment of the block body.
    """
    length = read_fmt(fmt, fp)[0]
    data = read_exact(fp, length)
    read_padding(fp, length, padding)
    return data


def skip_length_block(fp: BinaryIO, fmt: str = "I", padding: int = 1) -> int:
    """
    Skip a block prefixed by its length.

    :return: body length, padding and marker excluded.
    """
    length = read_fmt(fmt, fp)[0]
    seek_exact(fp, length)
    read_padding(fp, length, padding)
    return length


def seek_exact(fp: BinaryIO, size: int) -> None:
    """
    Move ``size`` bytes forward. The position is left unchanged when the
    stream is too short.
    """
    start = fp.tell()
    end = fp.seek(0, 2)
    fp.seek(start)
    if start + size > end:
        raise ParseError(
            "Truncated data: cannot skip %d bytes at offset %d (size %d)"
            % (size, start, end)
        )
    fp.seek(size, 1)


def is_readable(fp: BinaryIO, size: int = 1) -> bool:
    """Whether ``size`` more bytes can be read, without consuming them."""
    data = fp.read(size)
    fp.seek(-len(data), 1)
    return len(data) == size


def read_pascal_string(
    fp: BinaryIO, encoding: str = "macroman", padding: int = 2
) -> str:
    """Read a length byte and the string, padded with the length byte included."""
    length = read_fmt("B", fp)[0]
    data = read_exact(fp, length)
    fp.seek(pad(length + 1, padding) - length - 1, 1)
    return data.decode(encoding, "replace")


def read_unicode_string(fp: BinaryIO, padding: int = 1) -> str:
    """Read a UTF-16 string prefixed by its character count."""
    count = read_fmt("I", fp)[0]
    data = read_exact(fp, count * 2)
    read_padding(fp, 4 + count * 2, padding)
    return data.decode("utf-16-be", "replace").rstrip("\x00")


def read_be_array(fmt: str, count: int, fp: BinaryIO) -> array.array:
    """Read ``count`` big-endian items into an :py:class:`array.array`."""
    arr = array.array(fmt)
    arr.frombytes(read_exact(fp, count * arr.itemsize))
    if sys.byteorder == "little":
        arr.byteswap()
    return arr


def trimmed_repr(data: Any, trim_length: int = 16) -> str:
    if isinstance(data, bytes) and len(data) > trim_length:
        return repr(data[:trim_length] + b" ... =%d" % len(data))
    return repr(data)
