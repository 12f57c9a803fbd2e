"""
Rendering options.

Behaviour is configured through keyword arguments and immutable attrs
records::

    from psd_compose import RenderOptions, StyleDefaults

    options = RenderOptions(
        font_dirs=('/usr/share/fonts/truetype',),
        style_defaults=StyleDefaults(font_family='Inter-Bold'),
    )

When no font directories are given, ``PSD_COMPOSE_FONT_DIRS`` (a
:py:data:`os.pathsep` separated list) is consulted.
"""

import logging
import os
from typing import Optional, Tuple

from attrs import define, field

from psd_compose.validators import range_

logger = logging.getLogger(__name__)

FONT_DIRS_ENV = "PSD_COMPOSE_FONT_DIRS"


def _env_font_dirs() -> Tuple[str, ...]:
    value = os.environ.get(FONT_DIRS_ENV, "")
    return tuple(p for p in value.split(os.pathsep) if p)


@define(frozen=True)
class StyleDefaults:
    """
    Fallback values used when a type layer does not carry a style.

    .. py:attribute:: font_family

        PostScript name used when the run has no font.

    .. py:attribute:: font_size

        Size used when the layer has no style and no height.

    .. py:attribute:: fill

        ``#RRGGBB`` color used when the run has no fill color.

    .. py:attribute:: min_fallback_size

        Lower bound of the size estimated from the layer height.

    .. py:attribute:: fallback_scale

        Factor applied to the layer height to estimate the size.
    """

    font_family: str = "HelveticaNeueLTStd-Bd"
    font_size: int = 32
    fill: str = "#FFFFFF"
    min_fallback_size: int = 32
    fallback_scale: float = 1.1


@define(frozen=True)
class RenderOptions:
    """
    Options shared by the rendering entry points.

    .. py:attribute:: font_dirs

        Directories searched for ``<family>.ttf`` or ``<family>.otf``.

    .. py:attribute:: style_defaults

        See :py:class:`StyleDefaults`.

    .. py:attribute:: encoding

        Charset of pascal strings in the document, default ``macroman``.

    .. py:attribute:: compress_level

        PNG compression level, 0-9.
    """

    font_dirs: Tuple[str, ...] = field(factory=_env_font_dirs, converter=tuple)
    style_defaults: StyleDefaults = field(factory=StyleDefaults)
    encoding: str = "macroman"
    compress_level: int = field(default=6, validator=range_(0, 9))


def resolve_options(options: Optional[RenderOptions]) -> RenderOptions:
    """Return the given options or the defaults."""
    if options is None:
        options = RenderOptions()
    logger.debug("render options: %r" % (options,))
    return options
