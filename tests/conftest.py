"""Pytest configuration for psd-compose tests."""

from typing import Any

import pytest

from psd_compose.options import FONT_DIRS_ENV

from .psd_compose.utils import (
    group_end,
    group_start,
    pixel_layer,
    text_layer,
    write_background,
    write_psd,
)


@pytest.fixture(autouse=True)
def no_font_dirs_env(monkeypatch: Any) -> None:
    monkeypatch.delenv(FONT_DIRS_ENV, raising=False)


CARD_RECORDS = [
    pixel_layer("banner", (0, 0, 300, 30)),
    pixel_layer("[AVATAR]", (10, 20, 110, 120)),
    group_start(),
    text_layer(
        "{{USERNAME}}",
        (120, 40, 280, 70),
        text="Username",
        font=0,
        font_size=24.0,
        fill=(1.0, 1.0, 0.0, 0.0),
        justification=2,
    ),
    text_layer("{{ LEVEL }}", (120, 80, 200, 100), text="1", font=0, font_size=18.0),
    group_end("info", (120, 40, 280, 100)),
]


@pytest.fixture
def card_psd(tmp_path: Any) -> str:
    """300x200 card with a banner, an avatar region and two substitutions."""
    return write_psd(tmp_path / "card.psd", width=300, height=200, records=CARD_RECORDS)


@pytest.fixture
def card_background(tmp_path: Any) -> str:
    return write_background(tmp_path / "card.png", (600, 400))
