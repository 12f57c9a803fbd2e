"""
psd-compose: render text into PSD templates.

A PSD document is used as a template: type layers named ``{{KEY}}`` are
replaced by caller-supplied text and composited over a pre-rendered
background, and layers named ``[NAME]`` are exported as placement regions.

Basic usage::

    from psd_compose import extract_regions, render_to_file

    render_to_file('card.psd', 'card.png', 'out.png', {'USERNAME': 'Jordan'})
    print(extract_regions('card.psd')['AVATAR'].asdict())

Architecture:

- :py:mod:`psd_compose.psd`: Low-level binary structure parsing
- :py:mod:`psd_compose.api`: Document model, directives, styles and rendering
- :py:mod:`psd_compose.composite`: Text rasterization and compositing
- :py:mod:`psd_compose.compression`: Image compression codecs (RLE, ZIP)
"""

from psd_compose.api.document import Document, flatten
from psd_compose.api.render import (
    extract_regions,
    render_image,
    render_to_buffer,
    render_to_file,
)
from psd_compose.api.templates import list_templates, load_template, render_template
from psd_compose.options import RenderOptions, StyleDefaults
from psd_compose.version import __version__

__all__ = [
    "Document",
    "RenderOptions",
    "StyleDefaults",
    "extract_regions",
    "flatten",
    "list_templates",
    "load_template",
    "render_image",
    "render_template",
    "render_to_buffer",
    "render_to_file",
    "__version__",
]
