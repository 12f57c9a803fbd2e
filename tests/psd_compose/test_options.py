import os

import pytest

from psd_compose.options import FONT_DIRS_ENV, RenderOptions, StyleDefaults, resolve_options


def test_defaults() -> None:
    options = RenderOptions()
    assert options.font_dirs == ()
    assert options.style_defaults == StyleDefaults()
    assert options.encoding == "macroman"
    assert options.compress_level == 6


def test_font_dirs_from_env(monkeypatch) -> None:
    monkeypatch.setenv(FONT_DIRS_ENV, os.pathsep.join(["/fonts/a", "", "/fonts/b"]))
    assert RenderOptions().font_dirs == ("/fonts/a", "/fonts/b")
    assert RenderOptions(font_dirs=["/x"]).font_dirs == ("/x",)


@pytest.mark.parametrize("level", [-1, 10, None])
def test_invalid_compress_level(level) -> None:
    with pytest.raises(ValueError):
        RenderOptions(compress_level=level)


def test_resolve_options() -> None:
    options = RenderOptions(compress_level=9)
    assert resolve_options(options) is options
    assert resolve_options(None) == RenderOptions()
