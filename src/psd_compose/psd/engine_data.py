"""
EngineData reader.

Type layers store their character and paragraph styles in a PostScript-like
markup called EngineData::

    <<
        /EngineDict
        <<
            /Editor
            <<
                /Text (˛ˇMake a change and save.)
            >>
        >>
        /ResourceDict
        <<
            /FontSet [
            <<
                /Name (˛ˇHelveticaNeue-Light)
            >>
            ]
        >>
    >>

The markup is decoded into plain Python values: dictionaries keyed by the
property name without the slash, lists, `str`, `int`, `float` and `bool`::

    data = EngineData.frombytes(raw)
    runs = data['EngineDict']['StyleRun']['RunArray']
"""

import logging
import re
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Tuple

from psd_compose.registry import new_registry

logger = logging.getLogger(__name__)

READERS, register = new_registry()


def compile_re(pattern: str) -> "re.Pattern[bytes]":
    return re.compile(pattern.encode("ascii"), re.S)


class EngineToken(Enum):
    ARRAY_END = compile_re(r"^\]$")
    ARRAY_START = compile_re(r"^\[$")
    BOOLEAN = compile_re(r"^(true|false)$")
    DICT_END = compile_re(r"^>>(\x00)*$")
    DICT_START = compile_re(r"^<<$")
    NUMBER = compile_re(r"^-?\d+$")
    NUMBER_WITH_DECIMAL = compile_re(r"^-?\d*\.\d+$")
    PROPERTY = compile_re(r"^\/[a-zA-Z0-9]+$")
    STRING = compile_re(r"^\((\xfe\xff([^\)]|\\\))*)\)$")
    # Short ascii tags such as (hwid) or (aalt).
    UNKNOWN_TAG = compile_re(r"^\([a-zA-Z0-9]+\)$")


Token = Tuple[bytes, EngineToken]


class Tokenizer:
    """
    Split EngineData into typed tokens.

    Tokens are separated by whitespace, except UTF-16 strings which run from
    ``(\\xfe\\xff`` to the first unescaped ``)``::

        for token, token_type in Tokenizer(data):
            print('%s: %r' % (token_type.name, token))
    """

    DIVIDER = compile_re(r"[ \n\r\t]+")
    UTF16_START = b"(\xfe\xff"
    UTF16_END = compile_re(r"[^\\]\)")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.index = 0

    def __iter__(self) -> Iterator[Token]:
        return self

    def __len__(self) -> int:
        return len(self.data) - self.index

    def __next__(self) -> Token:
        token = b""
        while not token:
            if len(self) == 0:
                raise StopIteration
            token = self._next_token()

        for token_type in EngineToken:
            if token_type.value.search(token):
                return token, token_type
        raise ValueError("Unknown token: %r" % token)

    def _next_token(self) -> bytes:
        start = self.index
        if self.data.startswith(self.UTF16_START, start):
            match = self.UTF16_END.search(self.data, start + 1)
            if match is None:
                raise ValueError("Unterminated string: %r" % self.data[start : start + 32])
            self.index = match.end()
            return self.data[start : match.end()]

        match = self.DIVIDER.search(self.data, start)
        if match is None:
            self.index = len(self.data)
            return self.data[start:]
        self.index = match.end()
        return self.data[start : match.start()]


def _read_value(tokens: Tokenizer, token: bytes, token_type: EngineToken) -> Any:
    reader: Callable[[Tokenizer, bytes], Any] = READERS.get(token_type)
    if reader is None:
        raise ValueError("Unexpected token: %r" % token)
    return reader(tokens, token)


@register(EngineToken.DICT_START)
def _read_dict(tokens: Tokenizer, token: bytes = b"<<") -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key_token, key_type in tokens:
        if key_type == EngineToken.DICT_END:
            return result
        if key_type != EngineToken.PROPERTY:
            raise ValueError("Expected a property, got %r" % key_token)
        value = next(tokens, None)
        if value is None:
            raise ValueError("Missing value of %r" % key_token)
        result[key_token[1:].decode("macroman")] = _read_value(tokens, *value)
    logger.debug("Unterminated dict in engine data")
    return result


@register(EngineToken.ARRAY_START)
def _read_list(tokens: Tokenizer, token: bytes = b"[") -> List[Any]:
    result = []
    for item_token, item_type in tokens:
        if item_type == EngineToken.ARRAY_END:
            return result
        result.append(_read_value(tokens, item_token, item_type))
    logger.debug("Unterminated list in engine data")
    return result


@register(EngineToken.STRING)
def _read_string(tokens: Tokenizer, token: bytes) -> str:
    value = token[1:-1]
    for c in (b"\\", b"(", b")"):
        value = value.replace(b"\\" + c, c)
    return value.decode("utf-16")


@register(EngineToken.BOOLEAN)
def _read_boolean(tokens: Tokenizer, token: bytes) -> bool:
    return token == b"true"


@register(EngineToken.NUMBER)
def _read_integer(tokens: Tokenizer, token: bytes) -> int:
    return int(token)


@register(EngineToken.NUMBER_WITH_DECIMAL)
def _read_float(tokens: Tokenizer, token: bytes) -> float:
    return float(token)


@register(EngineToken.UNKNOWN_TAG)
def _read_tag(tokens: Tokenizer, token: bytes) -> str:
    return token[1:-1].decode("ascii")


class EngineData(dict):
    """
    Decoded EngineData, a `dict` of the top-level properties.

    :raise ValueError: the markup is malformed.
    """

    @classmethod
    def frombytes(cls, data: bytes) -> "EngineData":
        tokens = Tokenizer(data)
        first = next(tokens, None)
        if first is None or first[1] != EngineToken.DICT_START:
            raise ValueError("EngineData must start with <<")
        return cls(_read_dict(tokens))
