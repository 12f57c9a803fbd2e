"""
Layer node module.

Layers of a :py:class:`~psd_compose.api.document.Document` form a tree of
immutable nodes. Every node carries its name and bounding box; the concrete
class tells the kind:

- :py:class:`GroupNode`: a layer group with ordered ``children``
- :py:class:`TextNode`: a type layer with its text and style ``runs``
- :py:class:`OtherNode`: any other layer (pixel, shape, smart object, ...)

Children are stored in the PSD record order, bottom-most layer first, so
later entries sit higher in the stack.
"""

import logging
from typing import ClassVar, Optional, Tuple

from attrs import define, field

from psd_compose.api.typesetting import StyleRun
from psd_compose.constants import LayerKind

logger = logging.getLogger(__name__)


@define(frozen=True)
class LayerNode:
    """
    Common attributes of every layer node.

    .. py:attribute:: name

        Layer name, may be empty.

    .. py:attribute:: left
    .. py:attribute:: top
    .. py:attribute:: right
    .. py:attribute:: bottom

        Bounding box in document pixel space.

    .. py:attribute:: visible

        Visibility flag from the layer record, informational only.

    .. py:attribute:: layer_id

        Layer id from the ``lyid`` block, or `None`.
    """

    kind: ClassVar[LayerKind]

    name: str = ""
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0
    visible: bool = field(default=True, repr=False)
    layer_id: Optional[int] = field(default=None, repr=False)

    @property
    def bounds(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom) tuple."""
        return self.left, self.top, self.right, self.bottom

    @property
    def width(self) -> int:
        """Width of the layer, never negative."""
        return max(self.right - self.left, 0)

    @property
    def height(self) -> int:
        """Height of the layer, never negative."""
        return max(self.bottom - self.top, 0)

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height


@define(frozen=True)
class GroupNode(LayerNode):
    """
    Group of layers.

    .. py:attribute:: children

        Tuple of child nodes, bottom-most first.
    """

    kind: ClassVar[LayerKind] = LayerKind.GROUP

    children: Tuple[LayerNode, ...] = field(default=(), converter=tuple, repr=False)

    def __iter__(self):
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)


@define(frozen=True)
class TextNode(LayerNode):
    """
    Type layer.

    .. py:attribute:: text

        Plain text content.

    .. py:attribute:: runs

        Tuple of :py:class:`~psd_compose.api.typesetting.StyleRun`.

    .. py:attribute:: paragraph_justification

        Justification of the first paragraph, e.g. ``"center"``, or `None`.
    """

    kind: ClassVar[LayerKind] = LayerKind.TEXT

    text: str = field(default="", repr=False)
    runs: Tuple[StyleRun, ...] = field(default=(), converter=tuple, repr=False)
    paragraph_justification: Optional[str] = field(default=None, repr=False)


@define(frozen=True)
class OtherNode(LayerNode):
    """
    Layer that is neither a group nor a type layer.
    """

    kind: ClassVar[LayerKind] = LayerKind.OTHER
