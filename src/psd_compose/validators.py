"""
attrs validators used by the file structures.
"""

from typing import Any

from attrs import define
from attrs.validators import in_

__all__ = ["in_", "range_"]


@define(repr=False, frozen=True)
class _RangeValidator:
    minimum: int
    maximum: int

    def __call__(self, inst: Any, attr: Any, value: Any) -> None:
        try:
            ok = self.minimum <= value <= self.maximum
        except TypeError:
            ok = False
        if not ok:
            raise ValueError(
                "%r must be in range [%r, %r]: %r"
                % (attr.name, self.minimum, self.maximum, value)
            )

    def __repr__(self) -> str:
        return "<range_ validator [%r, %r]>" % (self.minimum, self.maximum)


def range_(minimum: int, maximum: int) -> _RangeValidator:
    """
    Validator raising :exc:`ValueError` unless ``minimum <= value <= maximum``.
    """
    return _RangeValidator(minimum, maximum)
