"""
Typesetting module for structured access to text layer data.

This module converts the raw ``EngineData`` markup of a type layer into an
ordered tuple of :py:class:`StyleRun` records. Run values are merged with the
document's normal style sheet, so a run that does not override a property
inherits the default.

Example::

    from psd_compose import Document

    doc = Document.open('card.psd')
    for node in doc.descendants():
        if node.kind == 'text':
            for run in node.runs:
                print(f"'{run.text}': {run.font_family} {run.font_size}pt")
"""

from __future__ import annotations

import logging
from typing import Any

from attrs import define

from psd_compose.constants import ENGINE_JUSTIFICATION
from psd_compose.psd.engine_data import EngineData

logger = logging.getLogger(__name__)


def _color_tuple(color_data: Any) -> tuple[float, ...] | None:
    """Extract RGB values from an EngineData ARGB color dict.

    Components that are absent are left out; the caller decides on defaults.
    """
    if color_data is None:
        return None
    values = color_data.get("Values")
    if values is None:
        return None
    values = [float(v) for v in values]
    if len(values) >= 4:
        return tuple(values[1:4])
    return tuple(values)


def _justification(value: Any) -> str | None:
    if value is None:
        return None
    try:
        return ENGINE_JUSTIFICATION.get(int(value))
    except (TypeError, ValueError):
        logger.debug("Unknown justification value: %r", value)
        return None


@define(frozen=True)
class StyleRun:
    """
    A contiguous span of text sharing one character style.

    .. py:attribute:: text
    .. py:attribute:: font_family

        PostScript name of the font, or `None`.

    .. py:attribute:: font_size

        Size in points, or `None`.

    .. py:attribute:: fill_color

        Tuple of unit floats in RGB order, or `None`. May hold fewer than
        three components when the source color is incomplete.

    .. py:attribute:: justification

        Justification of the paragraph the run starts in, e.g. ``"center"``.
    """

    text: str = ""
    font_family: str | None = None
    font_size: float | None = None
    fill_color: tuple[float, ...] | None = None
    justification: str | None = None


class _RunLengthIndex:
    """Map character indices to run indices using a run length array.

    Example::

        rli = _RunLengthIndex([4, 2, 5])
        rli(0)  # -> 0
        rli(3)  # -> 0
        rli(4)  # -> 1
        rli(6)  # -> 2
    """

    def __init__(self, run_length_array: list[Any]) -> None:
        self._boundaries: list[int] = []
        cumulative = 0
        for length in run_length_array:
            cumulative += int(length)
            self._boundaries.append(cumulative)

    def __call__(self, index: int) -> int:
        """Get the run index for the given character index."""
        for run_index, boundary in enumerate(self._boundaries):
            if index < boundary:
                return run_index
        return max(0, len(self._boundaries) - 1)


class TypeSetting:
    """
    Structured typographic data for a text layer.

    :param text: plain text of the layer.
    :param data: parsed :py:class:`~psd_compose.psd.engine_data.EngineData`.
    """

    def __init__(self, text: str, data: EngineData) -> None:
        self._text = text
        engine_dict = data.get("EngineDict") or {}
        resource_dict = data.get("ResourceDict") or data.get("DocumentResources") or {}
        self._fonts = self._build_fonts(resource_dict)
        self._default_char = self._default_sheet(
            resource_dict, "StyleSheetSet", "TheNormalStyleSheet", "StyleSheetData"
        )
        self._default_para = self._default_sheet(
            resource_dict, "ParagraphSheetSet", "TheNormalParagraphSheet", "Properties"
        )
        self._paragraph_justifications = self._build_paragraphs(engine_dict)
        self._runs = self._build_runs(engine_dict)

    @staticmethod
    def _build_fonts(resource_dict: Any) -> tuple[str, ...]:
        font_set = resource_dict.get("FontSet")
        if not font_set:
            return ()
        return tuple(str(font.get("Name", "")) for font in font_set)

    @staticmethod
    def _default_sheet(resource_dict: Any, set_key: str, index_key: str, data_key: str) -> Any:
        sheet_set = resource_dict.get(set_key)
        index = resource_dict.get(index_key)
        if sheet_set and index is not None:
            idx = int(index)
            if 0 <= idx < len(sheet_set):
                return sheet_set[idx].get(data_key) or {}
        return {}

    def _get(self, data: Any, key: str) -> Any:
        value = data.get(key) if data else None
        if value is None and self._default_char:
            value = self._default_char.get(key)
        return value

    def _font_name(self, data: Any) -> str | None:
        index = self._get(data, "Font")
        if index is None:
            return None
        index = int(index)
        if 0 <= index < len(self._fonts):
            return self._fonts[index] or None
        logger.debug("Font index %d out of range", index)
        return None

    def _build_paragraphs(self, engine_dict: Any) -> list[str | None]:
        para_run = engine_dict.get("ParagraphRun") or {}
        para_lengths = para_run.get("RunLengthArray") or []
        para_array = para_run.get("RunArray") or []
        index = _RunLengthIndex(para_lengths)
        result = []
        for item in para_array:
            sheet = item.get("ParagraphSheet") or {}
            props = sheet.get("Properties") or {}
            value = props.get("Justification")
            if value is None and self._default_para:
                value = self._default_para.get("Justification")
            result.append(_justification(value))
        self._paragraph_index = index
        return result

    def _justification_at(self, position: int) -> str | None:
        if not self._paragraph_justifications:
            if self._default_para:
                return _justification(self._default_para.get("Justification"))
            return None
        index = min(self._paragraph_index(position), len(self._paragraph_justifications) - 1)
        return self._paragraph_justifications[index]

    def _build_runs(self, engine_dict: Any) -> tuple[StyleRun, ...]:
        style_run = engine_dict.get("StyleRun") or {}
        run_lengths = style_run.get("RunLengthArray") or []
        run_array = style_run.get("RunArray") or []

        runs = []
        pos = 0
        for i in range(max(len(run_array), 1 if self._default_char else 0)):
            length = int(run_lengths[i]) if i < len(run_lengths) else len(self._text)
            end = min(pos + length, len(self._text))
            item = run_array[i] if i < len(run_array) else {}
            sheet = item.get("StyleSheet") or {}
            data = sheet.get("StyleSheetData") or {}
            font_size = self._get(data, "FontSize")
            runs.append(
                StyleRun(
                    text=self._text[pos:end],
                    font_family=self._font_name(data),
                    font_size=float(font_size) if font_size is not None else None,
                    fill_color=_color_tuple(self._get(data, "FillColor")),
                    justification=self._justification_at(pos),
                )
            )
            pos = end
        return tuple(runs)

    @property
    def runs(self) -> tuple[StyleRun, ...]:
        """Ordered style runs."""
        return self._runs

    @property
    def paragraph_justification(self) -> str | None:
        """Justification of the first paragraph."""
        return self._justification_at(0)

    @property
    def fonts(self) -> tuple[str, ...]:
        """Font names in the document font set."""
        return self._fonts
