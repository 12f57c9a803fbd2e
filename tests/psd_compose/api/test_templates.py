import io
import json
import os
from typing import Any, Optional

import pytest
from PIL import Image

from psd_compose.api.templates import (
    AvatarOverlay,
    TemplateConfig,
    XpBarOverlay,
    list_templates,
    load_template,
    map_variables,
    parse_color,
    render_template,
)
from psd_compose.errors import NotFoundError, ParseError

from ...conftest import CARD_RECORDS
from ..utils import write_background, write_psd


def make_template(root: Any, name: str, overlays: Optional[dict] = None, **kwargs: Any) -> str:
    directory = root / name
    directory.mkdir(parents=True)
    write_psd(directory / (name + ".psd"), width=300, height=200, records=CARD_RECORDS)
    write_background(directory / (name + ".png"), (600, 400))
    config = {
        "name": name,
        "description": "Profile card",
        "psd": name + ".psd",
        "background": name + ".png",
        "dimensions": {"width": 300, "height": 200},
        "psdVariables": {"USERNAME": "username", "LEVEL": "level"},
    }
    if overlays is not None:
        config["canvasOverlays"] = overlays
    config.update(kwargs)
    path = directory / (name + "-config.json")
    path.write_text(json.dumps(config))
    return str(path)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("rgba(20, 28, 45, 0.6)", (20, 28, 45, 153)),
        ("rgba(1,2,3,1)", (1, 2, 3, 255)),
        ("rgba(1, 2, 3, 128)", (1, 2, 3, 128)),
        ("#8ad3f4", (138, 211, 244, 255)),
        ("red", (255, 0, 0, 255)),
    ],
)
def test_parse_color(value: str, expected: tuple) -> None:
    assert parse_color(value) == expected


def test_parse_color_invalid() -> None:
    with pytest.raises(ValueError):
        parse_color("nope")


def test_list_templates(tmp_path) -> None:
    make_template(tmp_path, "me")
    make_template(tmp_path, "guild")
    (tmp_path / "empty").mkdir()
    assert list_templates(str(tmp_path)) == ["guild", "me"]


def test_list_templates_missing_root(tmp_path) -> None:
    assert list_templates(str(tmp_path / "missing")) == []


def test_load_template(tmp_path) -> None:
    make_template(
        tmp_path,
        "me",
        overlays={
            "avatar": {"enabled": True, "x": 60, "y": 70, "radius": 50},
            "xpBar": {"enabled": False, "x": 10, "y": 180, "width": 200, "height": 10},
        },
    )
    config = load_template(str(tmp_path), "me")
    assert config.name == "me"
    assert config.description == "Profile card"
    assert config.size == (300, 200)
    assert config.psd_path == os.path.join(str(tmp_path), "me", "me.psd")
    assert config.background_path == os.path.join(str(tmp_path), "me", "me.png")
    assert config.psd_variables == {"USERNAME": "username", "LEVEL": "level"}
    assert config.avatar == AvatarOverlay(enabled=True, x=60.0, y=70.0, radius=50.0)
    assert config.xp_bar == XpBarOverlay(enabled=False, x=10.0, y=180.0, width=200.0, height=10.0)


def test_load_template_without_overlays(tmp_path) -> None:
    make_template(tmp_path, "plain")
    config = load_template(str(tmp_path), "plain")
    assert config.avatar is None
    assert config.xp_bar is None


def test_load_template_not_found(tmp_path) -> None:
    with pytest.raises(NotFoundError):
        load_template(str(tmp_path), "missing")


def test_load_template_invalid_json(tmp_path) -> None:
    path = make_template(tmp_path, "me")
    with open(path, "w") as f:
        f.write("{not json")
    with pytest.raises(ParseError):
        load_template(str(tmp_path), "me")


def test_load_template_missing_field(tmp_path) -> None:
    make_template(tmp_path, "me", dimensions=None)
    with pytest.raises(ParseError):
        load_template(str(tmp_path), "me")


def test_map_variables() -> None:
    config = TemplateConfig(
        name="me",
        psd="me.psd",
        background="me.png",
        width=10,
        height=10,
        psd_variables={"USERNAME": "username", "LEVEL": "level", "RANK": "rank"},
    )
    assert map_variables(config, {"username": "Jordan", "level": 7, "rank": None}) == {
        "USERNAME": "Jordan",
        "LEVEL": "7",
    }


def test_render_template(tmp_path) -> None:
    make_template(tmp_path, "me")
    data = render_template(str(tmp_path), "me", {"username": "Jordan", "level": 3})
    with Image.open(io.BytesIO(data)) as image:
        assert image.size == (300, 200)
        assert image.convert("RGBA").getpixel((0, 0)) == (10, 20, 30, 255)


def test_render_template_with_overlays(tmp_path) -> None:
    make_template(
        tmp_path,
        "me",
        overlays={
            "avatar": {"enabled": True, "x": 60, "y": 70, "radius": 50},
            "xpBar": {"enabled": True, "x": 10, "y": 180, "width": 200, "height": 10},
        },
    )
    avatar_path = str(tmp_path / "avatar.png")
    Image.new("RGB", (50, 50), (0, 255, 0)).save(avatar_path)

    data = render_template(
        str(tmp_path), "me", {"username": "Jordan", "avatarPath": avatar_path, "xpPercent": 0.5}
    )
    with Image.open(io.BytesIO(data)) as f:
        image = f.convert("RGBA")
    assert image.getpixel((60, 70)) == (0, 255, 0, 255)
    assert image.getpixel((11, 21)) == (10, 20, 30, 255)
    assert image.getpixel((50, 185)) == (138, 211, 244, 255)
    unfilled = image.getpixel((150, 185))
    assert unfilled not in ((10, 20, 30, 255), (138, 211, 244, 255))
    assert image.getpixel((250, 185)) == (10, 20, 30, 255)


def test_render_template_disabled_overlays(tmp_path) -> None:
    make_template(
        tmp_path,
        "me",
        overlays={
            "avatar": {"enabled": False, "x": 60, "y": 70, "radius": 50},
            "xpBar": {"enabled": False, "x": 10, "y": 180, "width": 200, "height": 10},
        },
    )
    avatar_path = str(tmp_path / "avatar.png")
    Image.new("RGB", (50, 50), (0, 255, 0)).save(avatar_path)

    data = render_template(str(tmp_path), "me", {"avatarPath": avatar_path, "xpPercent": 1})
    with Image.open(io.BytesIO(data)) as f:
        image = f.convert("RGBA")
    assert image.getpixel((60, 70)) == (10, 20, 30, 255)
    assert image.getpixel((50, 185)) == (10, 20, 30, 255)


def test_render_template_missing_avatar(tmp_path) -> None:
    make_template(
        tmp_path, "me", overlays={"avatar": {"enabled": True, "x": 60, "y": 70, "radius": 50}}
    )
    data = render_template(str(tmp_path), "me", {"avatarPath": str(tmp_path / "missing.png")})
    with Image.open(io.BytesIO(data)) as f:
        assert f.convert("RGBA").getpixel((60, 70)) == (10, 20, 30, 255)


def test_render_template_not_found(tmp_path) -> None:
    with pytest.raises(NotFoundError):
        render_template(str(tmp_path), "missing", {})
