import io

import pytest

from psd_compose.api.document import Document, flatten
from psd_compose.api.layers import GroupNode, OtherNode, TextNode
from psd_compose.constants import ColorMode, LayerKind
from psd_compose.errors import NotFoundError, ParseError

from ..utils import (
    group_end,
    group_start,
    layer_id,
    layer_record,
    make_psd,
    pixel_layer,
    tagged_block,
    text_layer,
    unicode_name,
)


def names(nodes):
    return [node.name for node in nodes]


def test_document_attributes() -> None:
    doc = Document.frombytes(make_psd(300, 200, [pixel_layer("a", (0, 0, 10, 10))]))
    assert doc.size == (300, 200)
    assert doc.depth == 8
    assert doc.channels == 3
    assert doc.color_mode == ColorMode.RGB
    assert doc.version == 1
    assert doc.image_data is None
    assert len(doc) == 1


def test_document_open(tmp_path) -> None:
    path = tmp_path / "doc.psd"
    path.write_bytes(make_psd(20, 10, [pixel_layer("a", (0, 0, 1, 1))]))
    doc = Document.open(str(path))
    assert doc.size == (20, 10)
    doc = Document.open(path, skip_image_data=False)
    assert doc.image_data is not None
    with open(path, "rb") as f:
        assert names(Document.open(f)) == ["a"]


def test_document_empty() -> None:
    doc = Document.frombytes(make_psd(20, 10))
    assert doc.children == ()
    assert flatten(doc) == []


def test_group_tree() -> None:
    records = [
        pixel_layer("A", (0, 0, 1, 1)),
        group_start(),
        text_layer("B", (0, 0, 10, 10)),
        pixel_layer("C", (0, 0, 1, 1)),
        group_end("G", (0, 0, 10, 10)),
        pixel_layer("D", (0, 0, 1, 1)),
    ]
    doc = Document.frombytes(make_psd(20, 10, records))
    assert names(doc) == ["A", "G", "D"]
    group = doc.children[1]
    assert isinstance(group, GroupNode)
    assert group.kind == LayerKind.GROUP
    assert group.bounds == (0, 0, 10, 10)
    assert names(group) == ["B", "C"]
    assert names(flatten(doc)) == ["A", "G", "B", "C", "D"]


def test_nested_groups() -> None:
    records = [
        group_start(),
        group_start(),
        pixel_layer("X", (0, 0, 1, 1)),
        group_end("inner"),
        pixel_layer("Y", (0, 0, 1, 1)),
        group_end("outer"),
    ]
    doc = Document.frombytes(make_psd(20, 10, records))
    assert names(doc) == ["outer"]
    assert names(doc.children[0]) == ["inner", "Y"]
    assert names(doc.descendants()) == ["outer", "inner", "X", "Y"]


def test_empty_group() -> None:
    doc = Document.frombytes(make_psd(20, 10, [group_start(), group_end("empty")]))
    assert names(doc) == ["empty"]
    assert len(doc.children[0]) == 0


def test_unbalanced_group_end() -> None:
    records = [pixel_layer("A", (0, 0, 1, 1)), group_end("orphan")]
    doc = Document.frombytes(make_psd(20, 10, records))
    assert names(doc) == ["A", "orphan"]
    assert isinstance(doc.children[1], OtherNode)


def test_unterminated_group() -> None:
    records = [pixel_layer("A", (0, 0, 1, 1)), group_start(), pixel_layer("X", (0, 0, 1, 1))]
    doc = Document.frombytes(make_psd(20, 10, records))
    assert len(doc) == 2
    assert isinstance(doc.children[1], GroupNode)
    assert names(doc.children[1]) == ["X"]
    assert names(flatten(doc)) == ["A", "</Layer group>", "X"]


def test_deep_nesting() -> None:
    depth = 1500
    records = [group_start()] * depth + [pixel_layer("leaf", (0, 0, 1, 1))]
    records += [group_end("g%d" % i) for i in range(depth)]
    doc = Document.frombytes(make_psd(20, 10, records))
    nodes = flatten(doc)
    assert len(nodes) == depth + 1
    assert nodes[0].name == "g%d" % (depth - 1)
    assert nodes[-1].name == "leaf"


def test_each_node_visited_once() -> None:
    records = [
        group_start(),
        pixel_layer("a", (0, 0, 1, 1)),
        group_start(),
        pixel_layer("b", (0, 0, 1, 1)),
        group_end("g2"),
        group_end("g1"),
        pixel_layer("c", (0, 0, 1, 1)),
    ]
    nodes = flatten(Document.frombytes(make_psd(20, 10, records)))
    assert len(nodes) == len({id(node) for node in nodes}) == 5


def test_layer_name_prefers_unicode() -> None:
    record = layer_record("ascii", (0, 0, 1, 1), [unicode_name("Ünïcode"), layer_id(42)])
    doc = Document.frombytes(make_psd(20, 10, [record]))
    node = doc.children[0]
    assert node.name == "Ünïcode"
    assert node.layer_id == 42


def test_layer_name_from_pascal_string() -> None:
    doc = Document.frombytes(make_psd(20, 10, [layer_record("plain", (0, 0, 1, 1))]))
    assert doc.children[0].name == "plain"


def test_hidden_layer_flag() -> None:
    doc = Document.frombytes(make_psd(20, 10, [layer_record("h", (0, 0, 1, 1), flags=2)]))
    assert doc.children[0].visible is False


def test_text_node() -> None:
    record = text_layer(
        "{{USERNAME}}",
        (10, 20, 110, 60),
        text="Name",
        font=1,
        font_size=36.0,
        fill=(1.0, 0.0, 0.5, 1.0),
        justification=2,
        fonts=("Arial-BoldMT", "Inter-Bold"),
    )
    doc = Document.frombytes(make_psd(200, 100, [record]))
    node = doc.children[0]
    assert isinstance(node, TextNode)
    assert node.kind == LayerKind.TEXT
    assert node.text == "Name\r"
    assert node.size == (100, 40)
    assert node.paragraph_justification == "center"
    run = node.runs[0]
    assert run.font_family == "Inter-Bold"
    assert run.font_size == 36.0
    assert run.fill_color == (0.0, 0.5, 1.0)


def test_text_node_without_engine_data() -> None:
    record = text_layer("{{A}}", (0, 0, 10, 10), with_engine=False)
    node = Document.frombytes(make_psd(20, 10, [record])).children[0]
    assert isinstance(node, TextNode)
    assert node.runs == ()


def test_text_node_with_broken_type_tool() -> None:
    record = layer_record("{{A}}", (0, 0, 10, 10), [tagged_block(b"TySh", b"\x00\x01" + b"\x00" * 10)])
    node = Document.frombytes(make_psd(20, 10, [record])).children[0]
    assert isinstance(node, TextNode)
    assert node.text == ""
    assert node.runs == ()


def test_psb_document() -> None:
    doc = Document.frombytes(make_psd(20, 10, [pixel_layer("a", (0, 0, 1, 1))], version=2))
    assert doc.version == 2
    assert names(doc) == ["a"]


def test_open_missing(tmp_path) -> None:
    with pytest.raises(NotFoundError):
        Document.open(str(tmp_path / "missing.psd"))
    with pytest.raises(FileNotFoundError):
        Document.open(tmp_path / "missing.psd")


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"GIF89a" + b"\x00" * 40,
        make_psd(20, 10, [pixel_layer("a", (0, 0, 1, 1))])[:50],
        b"8BPS\x00\x03" + b"\x00" * 40,
    ],
)
def test_parse_error(data: bytes) -> None:
    with pytest.raises(ParseError):
        Document.frombytes(data)
    with pytest.raises(ValueError):
        Document.open(io.BytesIO(data))
