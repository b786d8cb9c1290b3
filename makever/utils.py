"""
makever utilities (internal helpers)

- Unset: marker for a parameter that was not passed. Unlike None (or ""),
  it is never a value a caller can mean; it is falsy and prints as "Unset".
- coalesce(value, default=None): materialize Unset into a concrete default.
- mirror("name"): read-only property over the backing field "_name",
  handing out containers as immutable snapshots.

    >>> coalesce(Unset, "patch")
    'patch'
    >>> coalesce("", "patch")
    ''
"""
import enum
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType


class UnsetType(enum.Enum):
    UNSET = "Unset"

    def __bool__(self):
        return False

    def __repr__(self):
        return self.value


Unset = UnsetType.UNSET


def coalesce(object, default=None, /):
    """
    `default` when `object` is Unset, `object` itself otherwise (None and ""
    included).
    """
    return default if object is Unset else object


def _snapshot(object):
    match object:
        case str():
            return object
        case Mapping():
            return MappingProxyType(object)
        case Set():
            return frozenset(object)
        case Sequence():
            return tuple(object)
    return object


def mirror(name, /):
    """
    Read-only property exposing `self._<name>`.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    attribute = "_" + name

    def getter(self):
        return _snapshot(getattr(self, attribute))
    getter.__name__ = getter.__qualname__ = name

    return property(getter, doc="read-only view of %r" % attribute)


__all__ = (
    "coalesce",
    "mirror",
    "UnsetType",
    "Unset",
)
