"""
Style resolution for type layers.

:py:func:`resolve_style` turns the first style run of a
:py:class:`~psd_compose.api.layers.TextNode` into the concrete values used to
draw replacement text. It never fails; any missing value falls back to
:py:class:`~psd_compose.options.StyleDefaults`.
"""

import logging
import math
from typing import Optional, Sequence

from attrs import define

from psd_compose.api.layers import TextNode
from psd_compose.api.typesetting import StyleRun
from psd_compose.constants import Justification
from psd_compose.options import StyleDefaults

logger = logging.getLogger(__name__)


@define(frozen=True)
class ResolvedStyle:
    """
    Concrete text style.

    .. py:attribute:: font_family
    .. py:attribute:: font_size

        Integer size in pixels.

    .. py:attribute:: fill

        ``#RRGGBB`` string.

    .. py:attribute:: justification

        :py:class:`~psd_compose.constants.Justification`.
    """

    font_family: str
    font_size: int
    fill: str
    justification: Justification


def _round(value: float) -> int:
    # Halves round up, 76.5 -> 77.
    return int(math.floor(value + 0.5))


def resolve_font_size(
    run: Optional[StyleRun], height: int, defaults: StyleDefaults
) -> int:
    if run is not None and run.font_size is not None and run.font_size > 0:
        return _round(run.font_size)
    if height > 0:
        return max(defaults.min_fallback_size, _round(height * defaults.fallback_scale))
    return defaults.font_size


def resolve_font_family(run: Optional[StyleRun], defaults: StyleDefaults) -> str:
    if run is not None and run.font_family:
        return run.font_family
    return defaults.font_family


def color_to_hex(color: Optional[Sequence[Optional[float]]], default: str = "#FFFFFF") -> str:
    """
    Convert an RGB tuple of unit floats to ``#RRGGBB``.

    Components are clamped to [0, 1]; missing components count as 1.0.
    """
    if color is None:
        return default
    components = list(color)[:3]
    components += [1.0] * (3 - len(components))
    result = "#"
    for value in components:
        if value is None:
            value = 1.0
        value = min(max(float(value), 0.0), 1.0)
        result += "%02X" % _round(value * 255)
    return result


def resolve_fill(run: Optional[StyleRun], defaults: StyleDefaults) -> str:
    return color_to_hex(run.fill_color if run is not None else None, defaults.fill)


def resolve_justification(
    paragraph: Optional[str], run: Optional[StyleRun] = None
) -> Justification:
    value = paragraph or (run.justification if run is not None else None) or ""
    value = value.lower()
    if "center" in value:
        return Justification.CENTER
    if "right" in value:
        return Justification.RIGHT
    return Justification.LEFT


def resolve_style(
    node: TextNode, defaults: Optional[StyleDefaults] = None
) -> ResolvedStyle:
    """
    Resolve the drawing style of a type layer.

    :param node: :py:class:`~psd_compose.api.layers.TextNode`.
    :param defaults: :py:class:`~psd_compose.options.StyleDefaults`.
    :return: :py:class:`ResolvedStyle`.
    """
    defaults = defaults or StyleDefaults()
    run = node.runs[0] if node.runs else None
    style = ResolvedStyle(
        font_family=resolve_font_family(run, defaults),
        font_size=resolve_font_size(run, node.height, defaults),
        fill=resolve_fill(run, defaults),
        justification=resolve_justification(node.paragraph_justification, run),
    )
    logger.debug("resolved style of %r: %r", node.name, style)
    return style
