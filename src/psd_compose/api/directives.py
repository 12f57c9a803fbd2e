"""
Layer name directives.

A layer name may encode one of two directives:

- substitution, ``{{USERNAME}}``: render the replacement text for ``USERNAME``
  in place of the layer. Only type layers qualify.
- region, ``[AVATAR]``: export the layer bounds as a named region. Any kind of
  layer qualifies.

Names are trimmed before matching and both patterns are fully anchored, so
``banner`` or ``{{USERNAME}} copy`` match nothing::

    >>> match_directive('{{ USERNAME }}')
    Substitute(key='USERNAME')
    >>> match_directive('[AVATAR]')
    Region(name='AVATAR')
    >>> match_directive('banner')
    NoDirective()
"""

import logging
import re
from typing import Union

from attrs import define

logger = logging.getLogger(__name__)

SUBSTITUTION_PATTERN = re.compile(r"^\{\{\s*([A-Z0-9_]+)\s*\}\}$")
REGION_PATTERN = re.compile(r"^\[([A-Z_]+)\]$")


@define(frozen=True)
class Substitute:
    key: str


@define(frozen=True)
class Region:
    name: str


@define(frozen=True)
class NoDirective:
    pass


Directive = Union[Substitute, Region, NoDirective]


def match_directive(name: str) -> Directive:
    """
    Classify a layer name.

    :param name: layer name, may be empty.
    :return: :py:class:`Substitute`, :py:class:`Region` or
        :py:class:`NoDirective`.
    """
    name = (name or "").strip()
    match = SUBSTITUTION_PATTERN.match(name)
    if match:
        return Substitute(match.group(1))
    match = REGION_PATTERN.match(name)
    if match:
        return Region(match.group(1))
    return NoDirective()


def substitution_key(name: str) -> Union[str, None]:
    """Return the substitution key of the layer name, or `None`."""
    directive = match_directive(name)
    return directive.key if isinstance(directive, Substitute) else None


def region_name(name: str) -> Union[str, None]:
    """Return the region name of the layer name, or `None`."""
    directive = match_directive(name)
    return directive.name if isinstance(directive, Region) else None
