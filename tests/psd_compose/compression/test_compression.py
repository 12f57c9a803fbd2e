import zlib

import pytest

from psd_compose.compression import decode_prediction, decompress
from psd_compose.constants import Compression

from ..utils import pack

RAW_IMAGE_3x3_8bit = b"\x00\x01\x02\x01\x01\x01\x01\x00\x00"


def test_raw() -> None:
    assert decompress(RAW_IMAGE_3x3_8bit + b"extra", Compression.RAW, 3, 3, 8) == RAW_IMAGE_3x3_8bit


def test_rle() -> None:
    rows = [b"\x02\x00\x01\x02", b"\xfe\x01", b"\x00\x01\xff\x00"]
    data = b"".join(pack("H", len(row)) for row in rows) + b"".join(rows)
    assert decompress(data, Compression.RLE, 3, 3, 8) == RAW_IMAGE_3x3_8bit


def test_rle_psb() -> None:
    rows = [b"\x02\x00\x01\x02", b"\xfe\x01", b"\x00\x01\xff\x00"]
    data = b"".join(pack("I", len(row)) for row in rows) + b"".join(rows)
    assert decompress(data, Compression.RLE, 3, 3, 8, version=2) == RAW_IMAGE_3x3_8bit


def test_zip() -> None:
    data = zlib.compress(RAW_IMAGE_3x3_8bit)
    assert decompress(data, Compression.ZIP, 3, 3, 8) == RAW_IMAGE_3x3_8bit


def test_zip_with_prediction() -> None:
    deltas = b"\x00\x01\x01\x01\x00\x00\x01\xff\x00"
    data = zlib.compress(deltas)
    assert decompress(data, Compression.ZIP_WITH_PREDICTION, 3, 3, 8) == RAW_IMAGE_3x3_8bit


def test_prediction_unsupported_depth() -> None:
    with pytest.raises(ValueError):
        decode_prediction(b"\x00\x00", 1, 1, 16)


@pytest.mark.parametrize(
    "data, compression",
    [
        (b"not zlib", Compression.ZIP),
        (b"not zlib", Compression.ZIP_WITH_PREDICTION),
        (zlib.compress(b"\x00" * 4), Compression.ZIP),
        (b"\x00" * 4, Compression.RAW),
    ],
)
def test_invalid(data: bytes, compression: Compression) -> None:
    with pytest.raises(ValueError):
        decompress(data, compression, 3, 3, 8)
