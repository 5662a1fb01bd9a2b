from __future__ import annotations

from typing import Protocol, runtime_checkable

from .bounded_file import BoundedFileSink


@runtime_checkable
class BaseSink(Protocol):
    """Base line sink interface.

    Sinks persist already-formatted log lines. Implementations must contain
    their own I/O errors: ``append`` and ``trim`` report failure through their
    return value and never raise into the logging path.
    """

    def append(self, line: str, *, max_lines: int) -> bool:  # noqa: D401
        """Append one formatted line, keeping at most ``max_lines`` lines."""
        ...

    def trim(self, max_lines: int) -> bool:  # pragma: no cover - protocol
        ...

    def read_bytes(self) -> bytes:  # pragma: no cover - protocol
        ...


__all__ = [
    "BaseSink",
    "BoundedFileSink",
]
