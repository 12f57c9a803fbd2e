"""
Rendering entry points.

Each call is a self-contained pipeline: the document is opened, every type
layer named ``{{KEY}}`` with an entry in ``replacements`` is replaced by the
rendered text, and the overlays are composited over the background::

    from psd_compose import render_to_file

    render_to_file(
        'card.psd', 'card.png', 'out/jordan.png', {'USERNAME': 'Jordan'}
    )

Layers whose key has no replacement are skipped, they are never rendered as
an empty string. Overlays are drawn in layer record order, so a layer higher
in the stack draws over a lower one.
"""

import logging
import os
import tempfile
from typing import Dict, List, Mapping, Optional, Tuple, Union

from PIL import Image

from psd_compose.api.directives import substitution_key
from psd_compose.api.document import Document
from psd_compose.api.layers import TextNode
from psd_compose.api.pil_io import convert_image_data_to_pil
from psd_compose.api.regions import Region, extract_regions_from_document
from psd_compose.api.style import resolve_style
from psd_compose.composite import composite, encode_png, overlay_size, rasterize_text
from psd_compose.composite.compositor import Overlay
from psd_compose.errors import EncodingError, OutputError
from psd_compose.options import RenderOptions, resolve_options

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def find_substitutions(
    document: Document, replacements: Mapping[str, str]
) -> List[Tuple[TextNode, str]]:
    """
    Pair type layers named ``{{KEY}}`` with their replacement text.

    :return: list of ``(node, text)`` in traversal order.
    """
    result = []
    for node in document.descendants():
        key = substitution_key(node.name)
        if key is None:
            continue
        if not isinstance(node, TextNode):
            logger.debug("skip %r: not a type layer", node.name)
            continue
        if key not in replacements:
            logger.debug("skip %r: no replacement for %s", node.name, key)
            continue
        result.append((node, str(replacements[key])))
    return result


def build_overlays(
    document: Document,
    replacements: Mapping[str, str],
    options: Optional[RenderOptions] = None,
) -> List[Overlay]:
    """
    Rasterize the replacement text of every matching layer.

    :return: list of ``(image, left, top)`` overlays in draw order.
    """
    options = resolve_options(options)
    overlays = []
    for node, text in find_substitutions(document, replacements):
        style = resolve_style(node, options.style_defaults)
        width, height = overlay_size(node.width, node.height, text, style.font_size)
        logger.debug(
            "render %r at (%d, %d) in %dx%d with %s %dpx %s",
            text,
            node.left,
            node.top,
            width,
            height,
            style.font_family,
            style.font_size,
            style.fill,
        )
        image = rasterize_text(text, width, height, style, options.font_dirs)
        overlays.append((image, node.left, node.top))
    return overlays


def render_image(
    document_path: PathLike,
    background_path: Optional[PathLike],
    replacements: Mapping[str, str],
    options: Optional[RenderOptions] = None,
) -> Image.Image:
    """
    Render the document to an RGBA PIL Image.

    See :py:func:`render_to_buffer` for the parameters.
    """
    options = resolve_options(options)
    document = Document.open(
        document_path,
        skip_image_data=background_path is not None,
        encoding=options.encoding,
    )
    background: Union[PathLike, Image.Image, None] = background_path
    if background is None:
        background = convert_image_data_to_pil(document)
        if background is None:
            raise EncodingError("Document has no composite preview: %s" % document_path)
    overlays = build_overlays(document, replacements, options)
    logger.debug("compositing %d overlays", len(overlays))
    return composite(background, document.size, overlays)


def render_to_buffer(
    document_path: PathLike,
    background_path: Optional[PathLike],
    replacements: Mapping[str, str],
    options: Optional[RenderOptions] = None,
) -> bytes:
    """
    Render the document and return PNG bytes.

    :param document_path: path to the PSD/PSB document.
    :param background_path: path to the background image, stretched to the
        canvas size. When `None`, the composite preview embedded in the
        document is used.
    :param replacements: mapping of substitution key to text.
    :param options: :py:class:`~psd_compose.options.RenderOptions`.
    :return: PNG bytes of exactly the document canvas size.
    :raise NotFoundError: the document or the background is missing.
    :raise ParseError: the document is malformed.
    :raise EncodingError: the background cannot be decoded or the output
        cannot be encoded.
    """
    options = resolve_options(options)
    image = render_image(document_path, background_path, replacements, options)
    return encode_png(image, options.compress_level)


def render_to_file(
    document_path: PathLike,
    background_path: Optional[PathLike],
    output_path: PathLike,
    replacements: Mapping[str, str],
    options: Optional[RenderOptions] = None,
) -> bytes:
    """
    Render the document and write the PNG to ``output_path``.

    Parent directories are created as needed. The file is written to a
    temporary name in the same directory and moved into place, so a failure
    never leaves a partial file behind.

    See :py:func:`render_to_buffer` for the other parameters.

    :return: the PNG bytes written.
    :raise OutputError: the output cannot be created or written.
    """
    data = render_to_buffer(document_path, background_path, replacements, options)
    write_atomic(output_path, data)
    return data


def write_atomic(output_path: PathLike, data: bytes) -> None:
    """Write ``data`` to ``output_path`` through a temporary file."""
    output_path = os.path.abspath(os.fspath(output_path))
    temp_path = None
    try:
        os.makedirs(os.path.dirname(output_path), exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=os.path.dirname(output_path),
            prefix=".psd-compose-",
            suffix=".tmp",
            delete=False,
        ) as f:
            temp_path = f.name
            f.write(data)
        os.replace(temp_path, output_path)
    except OSError as e:
        if temp_path is not None and os.path.exists(temp_path):
            os.unlink(temp_path)
        raise OutputError("Cannot write %s: %s" % (output_path, e)) from e
    logger.debug("wrote %d bytes to %s", len(data), output_path)


def extract_regions(
    document_path: PathLike, options: Optional[RenderOptions] = None
) -> Dict[str, Region]:
    """
    Extract the geometry of every ``[NAME]`` layer.

    :param document_path: path to the PSD/PSB document.
    :return: dict of region name to :py:class:`~psd_compose.api.regions.Region`.
    :raise NotFoundError: the document is missing.
    :raise ParseError: the document is malformed.
    """
    options = resolve_options(options)
    document = Document.open(document_path, encoding=options.encoding)
    return extract_regions_from_document(document)
