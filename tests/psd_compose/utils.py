"""
Builders for synthetic PSD byte streams.

Only the structures read by psd_compose are produced: the file header, empty
color mode data and image resources, layer records with tagged blocks, and a
RAW composite image data section.
"""

import logging
import struct
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from psd_compose.constants import ColorMode, SectionDivider

logging.basicConfig(level=logging.DEBUG)


def pack(fmt: str, *args: Any) -> bytes:
    return struct.pack(">" + fmt, *args)


def pad_to(data: bytes, divisor: int) -> bytes:
    remainder = len(data) % divisor
    if remainder:
        data += b"\x00" * (divisor - remainder)
    return data


def pascal_string(text: str, padding: int = 4) -> bytes:
    data = text.encode("macroman")
    return pad_to(pack("B", len(data)) + data, padding)


def unicode_string(text: str) -> bytes:
    return pack("I", len(text)) + text.encode("utf-16-be")


def tagged_block(key: bytes, data: bytes, padding: int = 1, signature: bytes = b"8BIM") -> bytes:
    return signature + key + pack("I", len(pad_to(data, padding))) + pad_to(data, padding)


def section_divider(kind: SectionDivider, blend_mode: Optional[bytes] = None) -> bytes:
    data = pack("I", kind)
    if blend_mode is not None:
        data += b"8BIM" + blend_mode
    return tagged_block(b"lsct", data)


def unicode_name(text: str) -> bytes:
    return tagged_block(b"luni", unicode_string(text))


def layer_id(value: int) -> bytes:
    return tagged_block(b"lyid", pack("I", value))


def _descriptor_key(key: bytes) -> bytes:
    if len(key) == 4:
        return pack("I", 0) + key
    return pack("I", len(key)) + key


def descriptor(items: Sequence[Tuple[bytes, bytes]], class_id: bytes = b"null") -> bytes:
    """Descriptor body; item values must already carry their OSType."""
    data = unicode_string("") + _descriptor_key(class_id) + pack("I", len(items))
    for key, value in items:
        data += _descriptor_key(key) + value
    return data


def descriptor_text(text: str) -> bytes:
    return b"TEXT" + unicode_string(text)


def descriptor_raw(data: bytes) -> bytes:
    return b"tdta" + pack("I", len(data)) + data


def engine_string(text: str) -> bytes:
    data = text.encode("utf-16-be")
    for c in (b"\\", b"(", b")"):
        data = data.replace(c, b"\\" + c)
    return b"(\xfe\xff" + data + b")"


def engine_markup(value: Any, indent: int = 0) -> bytes:
    """Serialize Python values into EngineData markup."""
    tab = b"\t" * indent
    if isinstance(value, dict):
        lines = [b"<<"]
        for key, item in value.items():
            lines.append(tab + b"\t/" + key.encode("ascii") + b" " + engine_markup(item, indent + 1))
        lines.append(tab + b">>")
        return b"\n".join(lines)
    if isinstance(value, (list, tuple)):
        return b"[ " + b" ".join(engine_markup(item, indent + 1) for item in value) + b" ]"
    if isinstance(value, bool):
        return b"true" if value else b"false"
    if isinstance(value, int):
        return b"%d" % value
    if isinstance(value, float):
        return repr(value).encode("ascii")
    if isinstance(value, str):
        return engine_string(value)
    raise TypeError("Unsupported value: %r" % (value,))


def engine_data(
    text: str,
    font_size: Optional[float] = None,
    font: Optional[int] = None,
    fill: Optional[Sequence[float]] = None,
    justification: Optional[int] = None,
    fonts: Iterable[str] = ("Arial-BoldMT",),
    default_style: Optional[dict] = None,
    runs: Optional[List[Tuple[int, dict]]] = None,
) -> bytes:
    """
    EngineData with a single style run unless ``runs`` is given.

    :param fill: ``Values`` of the ``FillColor``, ARGB unit floats.
    :param runs: list of ``(length, StyleSheetData)``.
    """
    if runs is None:
        style: dict = {}
        if font is not None:
            style["Font"] = font
        if font_size is not None:
            style["FontSize"] = float(font_size)
        if fill is not None:
            style["FillColor"] = {"Type": 1, "Values": [float(v) for v in fill]}
        runs = [(len(text), style)]

    properties: dict = {}
    if justification is not None:
        properties["Justification"] = justification

    resources: dict = {
        "FontSet": [{"Name": name, "Script": 0, "FontType": 1, "Synthetic": 0} for name in fonts],
    }
    if default_style is not None:
        resources["StyleSheetSet"] = [{"Name": "Normal RGB", "StyleSheetData": default_style}]
        resources["TheNormalStyleSheet"] = 0

    data = {
        "EngineDict": {
            "Editor": {"Text": text},
            "ParagraphRun": {
                "RunArray": [{"ParagraphSheet": {"DefaultStyleSheet": 0, "Properties": properties}}],
                "RunLengthArray": [len(text)],
                "IsJoinable": 1,
            },
            "StyleRun": {
                "RunArray": [{"StyleSheet": {"StyleSheetData": style}} for _, style in runs],
                "RunLengthArray": [length for length, _ in runs],
                "IsJoinable": 2,
            },
            "AntiAlias": 4,
        },
        "ResourceDict": resources,
    }
    return b"\n\n" + engine_markup(data) + b"\n\x00"


def type_tool(
    text: str,
    engine: Optional[bytes] = None,
    bounds: Tuple[int, int, int, int] = (0, 0, 0, 0),
) -> bytes:
    """``TySh`` tagged block."""
    items = [(b"Txt ", descriptor_text(text + "\r"))]
    if engine is not None:
        items.append((b"EngineData", descriptor_raw(engine)))
    data = pack("H6dH", 1, 1.0, 0.0, 0.0, 1.0, 0.0, 0.0, 50)
    data += pack("I", 16) + descriptor(items, b"TxLr")
    data += pack("H", 1) + pack("I", 16) + descriptor([], b"warp")
    data += pack("4i", *bounds)
    return tagged_block(b"TySh", data)


def layer_record(
    name: str = "",
    bounds: Tuple[int, int, int, int] = (0, 0, 0, 0),
    blocks: Sequence[bytes] = (),
    flags: int = 0,
    channels: Sequence[Tuple[int, int]] = (),
) -> bytes:
    """
    Layer record.

    :param bounds: (left, top, right, bottom).
    :param channels: list of ``(id, length)`` channel info.
    """
    left, top, right, bottom = bounds
    data = pack("4iH", top, left, bottom, right, len(channels))
    for channel_id, length in channels:
        data += pack("hI", channel_id, length)
    data += b"8BIM" + b"norm" + pack("BB", 255, 0) + pack("B", flags)
    extra = pack("I", 0) + pack("I", 0) + pascal_string(name) + b"".join(blocks)
    data += b"\x00" + pack("I", len(extra)) + extra
    return data


def text_layer(
    name: str,
    bounds: Tuple[int, int, int, int],
    text: str = "Text",
    with_engine: bool = True,
    **kwargs: Any,
) -> bytes:
    """Type layer; ``kwargs`` go to :py:func:`engine_data`."""
    engine = engine_data(text, **kwargs) if with_engine else None
    return layer_record(name, bounds, [unicode_name(name), type_tool(text, engine)])


def pixel_layer(name: str, bounds: Tuple[int, int, int, int]) -> bytes:
    return layer_record(name, bounds, [unicode_name(name)])


def group_start() -> bytes:
    return layer_record("</Layer group>", blocks=[section_divider(SectionDivider.BOUNDING_SECTION_DIVIDER)])


def group_end(name: str, bounds: Tuple[int, int, int, int] = (0, 0, 0, 0)) -> bytes:
    return layer_record(
        name,
        bounds,
        [unicode_name(name), section_divider(SectionDivider.OPEN_FOLDER, b"pass")],
    )


def make_psd(
    width: int = 200,
    height: int = 100,
    records: Sequence[bytes] = (),
    version: int = 1,
    channels: int = 3,
    color_mode: ColorMode = ColorMode.RGB,
    image_data: Optional[bytes] = None,
    fill: int = 255,
    channel_data: bytes = b"",
    global_blocks: bytes = b"",
) -> bytes:
    """
    Complete PSD (or PSB when ``version`` is 2) byte stream.

    :param records: layer records, bottom-most first.
    :param image_data: image data section; RAW planes filled with ``fill``
        when omitted.
    :param channel_data: channel image data following the records.
    """
    length_fmt = ("I", "Q")[version - 1]
    header = b"8BPS" + pack("H", version) + b"\x00" * 6
    header += pack("HIIHH", channels, height, width, 8, color_mode)

    layer_info = b""
    if records:
        body = pack("h", len(records)) + b"".join(records) + channel_data
        layer_info = pack(length_fmt, len(body)) + body
    else:
        layer_info = pack(length_fmt, 0)
    section = layer_info + pack("I", 0) + global_blocks
    layer_and_mask = pack(length_fmt, len(section)) + section

    if image_data is None:
        image_data = pack("H", 0) + bytes([fill]) * (width * height * channels)

    return header + pack("I", 0) + pack("I", 0) + layer_and_mask + image_data


def write_psd(path: Any, **kwargs: Any) -> str:
    data = make_psd(**kwargs)
    with open(str(path), "wb") as f:
        f.write(data)
    return str(path)


def write_background(path: Any, size: Tuple[int, int], color: Any = (10, 20, 30)) -> str:
    from PIL import Image

    Image.new("RGB", size, color).save(str(path))
    return str(path)
