"""
Registry of readers keyed by a type code.

Descriptor values, EngineData tokens and tagged blocks are all dispatched on a
code read from the stream::

    READERS, register = new_registry()

    @register(OSType.BOOLEAN)
    def _read_boolean(fp):
        return read_fmt('?', fp)[0]

    value = READERS[OSType.BOOLEAN](fp)
"""

from typing import Any, Callable, Dict, Tuple, TypeVar

T = TypeVar("T")


def new_registry() -> Tuple[Dict[Any, Any], Callable]:
    """
    Returns an empty dict and a ``@register(key)`` decorator filling it.

    The decorator returns the decorated object unchanged, so it can be
    stacked to register one reader under several keys.
    """
    registry: Dict[Any, Any] = {}

    def register(key: Any) -> Callable[[T], T]:
        def decorator(obj: T) -> T:
            registry[key] = obj
            return obj

        return decorator

    return registry, register
