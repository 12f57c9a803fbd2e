"""
Region extraction.

Layers named ``[NAME]`` mark reference areas, e.g. where an avatar goes. Their
bounds are exported as :py:class:`Region` records keyed by ``NAME``::

    from psd_compose import Document
    from psd_compose.api.regions import extract_regions_from_document

    regions = extract_regions_from_document(Document.open('card.psd'))
    print(regions['AVATAR'].asdict())
"""

import logging
from typing import Any, Dict, Union

from attrs import define

from psd_compose.api.directives import region_name
from psd_compose.api.document import Document
from psd_compose.api.layers import LayerNode

logger = logging.getLogger(__name__)


def _number(value: float) -> Union[int, float]:
    if float(value).is_integer():
        return int(value)
    return value


@define(frozen=True)
class Region:
    """
    Geometry of a region layer.

    .. py:attribute:: x
    .. py:attribute:: y
    .. py:attribute:: width
    .. py:attribute:: height
    .. py:attribute:: center_x
    .. py:attribute:: center_y
    .. py:attribute:: radius

        Radius of the largest circle centered in the box,
        ``min(width, height) / 2``.
    """

    x: int
    y: int
    width: int
    height: int
    center_x: float
    center_y: float
    radius: float

    @classmethod
    def from_layer(cls, node: LayerNode) -> "Region":
        width, height = node.width, node.height
        return cls(
            x=node.left,
            y=node.top,
            width=width,
            height=height,
            center_x=node.left + width / 2,
            center_y=node.top + height / 2,
            radius=min(width, height) / 2,
        )

    def asdict(self) -> Dict[str, Any]:
        """Return a JSON friendly dict with camelCase keys."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "centerX": _number(self.center_x),
            "centerY": _number(self.center_y),
            "radius": _number(self.radius),
        }


def extract_regions_from_document(document: Document) -> Dict[str, Region]:
    """
    Collect region layers of any kind in traversal order.

    When two layers share a region name, the later one wins.
    """
    regions: Dict[str, Region] = {}
    for node in document.descendants():
        name = region_name(node.name)
        if name is None:
            continue
        if name in regions:
            logger.debug("region %s redefined by a later layer", name)
        regions[name] = Region.from_layer(node)
    return regions
