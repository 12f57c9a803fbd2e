"""
Template rendering.

A template is a directory ``<root>/<name>/`` holding a PSD document, a
background image and a ``<name>-config.json`` file::

    {
        "name": "me",
        "description": "Profile card",
        "psd": "me.psd",
        "background": "me.png",
        "dimensions": {"width": 934, "height": 282},
        "psdVariables": {"USERNAME": "username", "LEVEL": "level"},
        "canvasOverlays": {
            "avatar": {"enabled": true, "x": 141, "y": 141, "radius": 100},
            "xpBar": {"enabled": true, "x": 300, "y": 200, "width": 580,
                      "height": 36}
        }
    }

``psdVariables`` maps substitution keys of the document to keys of the render
data. After the document is rendered, the optional overlays are drawn on top:
a circular avatar read from ``data["avatarPath"]`` and a progress bar filled
to ``data["xpPercent"]``.
"""

import json
import logging
import os
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from attrs import define, field
from PIL import Image, ImageChops, ImageColor, ImageDraw

from psd_compose.api.render import PathLike, render_image
from psd_compose.composite import composite, encode_png
from psd_compose.errors import NotFoundError, ParseError
from psd_compose.options import RenderOptions, resolve_options

logger = logging.getLogger(__name__)

CONFIG_SUFFIX = "-config.json"

DEFAULT_XP_BACKGROUND = "rgba(20, 28, 45, 0.6)"
DEFAULT_XP_FILL = "#8ad3f4"

_RGBA_PATTERN = re.compile(
    r"^rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*([0-9]*\.?[0-9]+)\s*\)$"
)


def parse_color(value: str) -> Tuple[int, int, int, int]:
    """
    Parse a CSS color into an RGBA tuple.

    Accepts everything :py:func:`PIL.ImageColor.getcolor` does, plus
    ``rgba()`` with a unit float alpha such as ``rgba(20, 28, 45, 0.6)``.
    """
    match = _RGBA_PATTERN.match(value.strip())
    if match:
        r, g, b = (min(int(match.group(i)), 255) for i in (1, 2, 3))
        alpha = float(match.group(4))
        if alpha <= 1.0:
            alpha *= 255
        return r, g, b, int(round(min(alpha, 255)))
    return ImageColor.getcolor(value, "RGBA")  # type: ignore[return-value]


@define(frozen=True)
class AvatarOverlay:
    """
    Circular avatar centered at (``x``, ``y``).
    """

    enabled: bool = False
    x: float = 0
    y: float = 0
    radius: float = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AvatarOverlay":
        return cls(
            enabled=bool(data.get("enabled", False)),
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            radius=float(data.get("radius", 0)),
        )


@define(frozen=True)
class XpBarOverlay:
    """
    Progress bar drawn as two rounded rectangles.

    .. py:attribute:: radius

        Corner radius, half the height when `None`.
    """

    enabled: bool = False
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0
    radius: Optional[float] = None
    background_color: str = DEFAULT_XP_BACKGROUND
    fill_color: str = DEFAULT_XP_FILL

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "XpBarOverlay":
        radius = data.get("radius")
        return cls(
            enabled=bool(data.get("enabled", False)),
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
            radius=float(radius) if radius is not None else None,
            background_color=data.get("backgroundColor") or DEFAULT_XP_BACKGROUND,
            fill_color=data.get("fillColor") or DEFAULT_XP_FILL,
        )


@define(frozen=True)
class TemplateConfig:
    """
    Parsed ``<name>-config.json``.

    .. py:attribute:: directory

        Template directory, ``psd`` and ``background`` are relative to it.

    .. py:attribute:: psd_variables

        Mapping of substitution key to render data key.
    """

    name: str
    psd: str
    background: str
    width: int
    height: int
    directory: str = ""
    description: str = ""
    psd_variables: Dict[str, str] = field(factory=dict)
    avatar: Optional[AvatarOverlay] = None
    xp_bar: Optional[XpBarOverlay] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], directory: str = "") -> "TemplateConfig":
        dimensions = data["dimensions"]
        overlays = data.get("canvasOverlays") or {}
        avatar = overlays.get("avatar")
        xp_bar = overlays.get("xpBar")
        return cls(
            name=str(data["name"]),
            psd=str(data["psd"]),
            background=str(data["background"]),
            width=int(dimensions["width"]),
            height=int(dimensions["height"]),
            directory=directory,
            description=str(data.get("description") or ""),
            psd_variables={str(k): str(v) for k, v in (data.get("psdVariables") or {}).items()},
            avatar=AvatarOverlay.from_dict(avatar) if avatar else None,
            xp_bar=XpBarOverlay.from_dict(xp_bar) if xp_bar else None,
        )

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def psd_path(self) -> str:
        return os.path.join(self.directory, self.psd)

    @property
    def background_path(self) -> str:
        return os.path.join(self.directory, self.background)


def _config_path(root: PathLike, name: str) -> str:
    return os.path.join(os.fspath(root), name, name + CONFIG_SUFFIX)


def list_templates(root: PathLike) -> List[str]:
    """Return the sorted names of templates under ``root``."""
    if not os.path.isdir(root):
        return []
    return sorted(
        name
        for name in os.listdir(root)
        if os.path.isfile(_config_path(root, name))
    )


def load_template(root: PathLike, name: str) -> TemplateConfig:
    """
    Load the configuration of a template.

    :raise NotFoundError: the template does not exist.
    :raise ParseError: the configuration is not valid JSON or lacks a
        required field.
    """
    path = _config_path(root, name)
    if not os.path.isfile(path):
        raise NotFoundError('Template "%s" not found' % name)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        raise ParseError("Invalid template config %s: %s" % (path, e)) from e
    except OSError as e:
        raise NotFoundError("Cannot read template config %s: %s" % (path, e)) from e

    try:
        return TemplateConfig.from_dict(data, directory=os.path.dirname(path))
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ParseError("Invalid template config %s: %r" % (path, e)) from e


def map_variables(config: TemplateConfig, data: Mapping[str, Any]) -> Dict[str, str]:
    """Build document replacements from render data, skipping missing values."""
    replacements = {}
    for key, data_key in config.psd_variables.items():
        value = data.get(data_key)
        if value is not None:
            replacements[key] = str(value)
    return replacements


def _avatar_overlay(config: AvatarOverlay, path: PathLike) -> Optional[Tuple[Image.Image, int, int]]:
    diameter = int(round(config.radius * 2))
    if diameter <= 0:
        logger.debug("skip avatar: radius %g", config.radius)
        return None
    try:
        with Image.open(path) as f:
            avatar = f.convert("RGBA").resize((diameter, diameter), Image.Resampling.LANCZOS)
    except (OSError, ValueError) as e:
        logger.error("Error loading avatar %s: %s", path, e)
        return None

    mask = Image.new("L", avatar.size, 0)
    ImageDraw.Draw(mask).ellipse((0, 0, diameter - 1, diameter - 1), fill=255)
    avatar.putalpha(ImageChops.multiply(avatar.getchannel("A"), mask))
    left = int(round(config.x - config.radius))
    top = int(round(config.y - config.radius))
    return avatar, left, top


def _xp_bar_overlay(
    config: XpBarOverlay, percent: Any, size: Tuple[int, int]
) -> Optional[Tuple[Image.Image, int, int]]:
    try:
        percent = max(0.0, min(1.0, float(percent)))
    except (TypeError, ValueError):
        logger.debug("skip xp bar: invalid percent %r", percent)
        return None
    if config.width <= 0 or config.height <= 0:
        return None

    radius = config.radius if config.radius is not None else config.height / 2
    try:
        background = parse_color(config.background_color)
        fill = parse_color(config.fill_color)
    except ValueError as e:
        logger.error("Invalid xp bar color: %s", e)
        return None

    x0, y0 = int(round(config.x)), int(round(config.y))
    y1 = int(round(config.y + config.height))
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    ImageDraw.Draw(layer).rounded_rectangle(
        (x0, y0, int(round(config.x + config.width)), y1),
        radius=int(round(radius)),
        fill=background,
    )
    fill_width = int(round(config.width * percent))
    if fill_width > 0:
        bar = Image.new("RGBA", size, (0, 0, 0, 0))
        ImageDraw.Draw(bar).rounded_rectangle(
            (x0, y0, x0 + fill_width, y1),
            radius=int(round(min(radius, fill_width / 2))),
            fill=fill,
        )
        layer = Image.alpha_composite(layer, bar)
    return layer, 0, 0


def render_template(
    root: PathLike,
    name: str,
    data: Mapping[str, Any],
    options: Optional[RenderOptions] = None,
) -> bytes:
    """
    Render a template with its overlays.

    :param root: directory holding the templates.
    :param name: template name.
    :param data: render data; ``avatarPath`` and ``xpPercent`` feed the
        overlays, other keys are looked up through ``psdVariables``.
    :return: PNG bytes of the template dimensions.
    """
    options = resolve_options(options)
    config = load_template(root, name)
    replacements = map_variables(config, data)
    logger.debug("template %s replacements: %r", name, replacements)

    image = render_image(config.psd_path, config.background_path, replacements, options)
    overlays = [(image, 0, 0)]

    if config.avatar is not None and config.avatar.enabled and data.get("avatarPath"):
        overlay = _avatar_overlay(config.avatar, data["avatarPath"])
        if overlay is not None:
            overlays.append(overlay)

    if config.xp_bar is not None and config.xp_bar.enabled and data.get("xpPercent") is not None:
        overlay = _xp_bar_overlay(config.xp_bar, data["xpPercent"], config.size)
        if overlay is not None:
            overlays.append(overlay)

    base = Image.new("RGBA", config.size, (0, 0, 0, 0))
    return encode_png(composite(base, config.size, overlays), options.compress_level)
