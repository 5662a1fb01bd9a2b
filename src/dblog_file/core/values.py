"""
Classification of message-context values.

Context mappings carry arbitrary objects. Before interpolation every value is
classified into one of a closed set of kinds, and its string form is derived
from the kind alone:

- ``NULL``         -> empty string
- ``BOOLEAN``      -> ``str(value)``
- ``NUMBER``       -> ``str(value)``
- ``STRING``       -> the text itself (bytes decoded as UTF-8)
- ``SEQUENCE``     -> ``[array]``
- ``DISPLAYABLE``  -> ``str(value)`` (the type defines its own ``__str__``)
- ``OPAQUE``       -> ``[complex value]``
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence, Set
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final

ARRAY_MARKER: Final[str] = "[array]"
COMPLEX_MARKER: Final[str] = "[complex value]"


class ValueKind(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    DISPLAYABLE = "displayable"
    OPAQUE = "opaque"


def _has_own_str(value: Any) -> bool:
    return type(value).__str__ is not object.__str__


def classify(value: Any) -> ValueKind:
    """Return the kind of a context value."""
    if value is None:
        return ValueKind.NULL
    # bool before number: bool is an int subclass
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, (str, bytes, bytearray)):
        return ValueKind.STRING
    if isinstance(value, (Mapping, Set)) or (
        isinstance(value, Sequence) and not isinstance(value, memoryview)
    ):
        return ValueKind.SEQUENCE
    if _has_own_str(value):
        return ValueKind.DISPLAYABLE
    return ValueKind.OPAQUE


@dataclass(frozen=True)
class ContextValue:
    """A context value tagged with its kind."""

    kind: ValueKind
    raw: Any

    @classmethod
    def of(cls, value: Any) -> ContextValue:
        return cls(kind=classify(value), raw=value)

    def render(self) -> str:
        """Return the string used when substituting a placeholder."""
        kind = self.kind
        if kind is ValueKind.NULL:
            return ""
        if kind is ValueKind.STRING:
            if isinstance(self.raw, (bytes, bytearray)):
                return bytes(self.raw).decode("utf-8", errors="replace")
            return str(self.raw)
        if kind in (ValueKind.BOOLEAN, ValueKind.NUMBER):
            return str(self.raw)
        if kind is ValueKind.SEQUENCE:
            return ARRAY_MARKER
        if kind is ValueKind.DISPLAYABLE:
            try:
                return str(self.raw)
            except Exception:
                # A broken __str__ is no better than an opaque object
                return COMPLEX_MARKER
        return COMPLEX_MARKER


def render_value(value: Any) -> str:
    """Shorthand for ``ContextValue.of(value).render()``."""
    return ContextValue.of(value).render()
