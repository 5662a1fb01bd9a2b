from __future__ import annotations

import os
import sys
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

from ...core import diagnostics
from ...core.errors import LogFileNotFoundError
from ...metrics.metrics import MetricsCollector

if sys.platform != "win32":
    import fcntl
else:  # pragma: no cover - no advisory locks on Windows
    fcntl = None

# One lock per resolved path, shared by every sink instance in the process
_PATH_LOCKS: dict[str, threading.RLock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = os.path.abspath(path)
    with _PATH_LOCKS_GUARD:
        lock = _PATH_LOCKS.get(key)
        if lock is None:
            lock = _PATH_LOCKS[key] = threading.RLock()
        return lock


def _split_lines(data: bytes) -> list[bytes]:
    if not data:
        return []
    lines = data.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    return lines


def _join_lines(lines: list[bytes]) -> bytes:
    return b"\n".join(lines) + b"\n" if lines else b""


class BoundedFileSink:
    """Append-only text file capped at a number of lines.

    - Trimming and appending happen in one critical section: a per-path
      thread lock plus an exclusive ``flock`` on the file (POSIX)
    - The oldest lines are dropped first; order is preserved
    - A trim writes the retained lines to a temporary file and swaps it in
      with ``os.replace``; a failed write leaves the old file untouched
    - The file is created on first append and never deleted here
    - Never raises upstream from ``append``/``trim``; errors are contained
    """

    name = "bounded-file"

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        encoding: str = "utf-8",
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._path = Path(path)
        self._encoding = encoding
        self._metrics = metrics
        self._lock = _lock_for(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def _is_current(self, fh: IO[bytes]) -> bool:
        try:
            current = os.stat(self._path)
        except FileNotFoundError:
            return False
        return os.path.samestat(os.fstat(fh.fileno()), current)

    @contextmanager
    def _locked(self, mode: str, *, shared: bool = False) -> Iterator[IO[bytes]]:
        with self._lock:
            while True:
                fh = open(self._path, mode)
                if fcntl is None:
                    break
                try:
                    fcntl.flock(fh.fileno(), fcntl.LOCK_SH if shared else fcntl.LOCK_EX)
                except BaseException:
                    fh.close()
                    raise
                # Another process may have swapped the file in while we waited
                if self._is_current(fh):
                    break
                fh.close()
            try:
                yield fh
            finally:
                if fcntl is not None:
                    fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
                fh.close()

    def _replace_contents(self, fh: IO[bytes], data: bytes) -> None:
        """Atomically replace the file held open as ``fh`` with ``data``."""
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(tmp_name, os.fstat(fh.fileno()).st_mode & 0o7777)
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def _fail(self, stage: str, message: str, error: BaseException) -> None:
        diagnostics.warn(
            "sink",
            message,
            sink=self.name,
            path=str(self._path),
            error=type(error).__name__,
            detail=str(error),
        )
        if self._metrics is not None:
            self._metrics.record_failure(stage=stage)

    def append(self, line: str, *, max_lines: int) -> bool:
        """Append ``line`` so the file keeps at most ``max_lines`` lines.

        An entry spanning more than ``max_lines`` lines keeps only its last
        ``max_lines`` lines. Returns False when the write failed; the failure
        is reported through diagnostics and metrics, never raised.
        """
        cap = max(max_lines, 1)
        entry = line if line.endswith("\n") else line + "\n"
        try:
            entry_lines = _split_lines(entry.encode(self._encoding, errors="replace"))
            clipped = max(len(entry_lines) - cap, 0)
            payload = _join_lines(entry_lines[clipped:])
            keep = cap - (len(entry_lines) - clipped)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._locked("a+b") as fh:
                fh.seek(0)
                existing = fh.read()
                lines = _split_lines(existing)
                dropped = max(len(lines) - keep, 0)
                if dropped:
                    self._replace_contents(fh, _join_lines(lines[dropped:]) + payload)
                else:
                    if existing and not existing.endswith(b"\n"):
                        fh.write(b"\n")
                    fh.write(payload)
                    fh.flush()
        except (OSError, LookupError) as e:
            self._fail("append", "log file append failed", e)
            return False
        if self._metrics is not None:
            self._metrics.record_line_written(trimmed=dropped + clipped)
        return True

    def trim(self, max_lines: int) -> bool:
        """Drop the oldest lines until at most ``max_lines`` remain.

        A missing file is a no-op. Returns True when lines were dropped.
        """
        try:
            with self._locked("r+b") as fh:
                lines = _split_lines(fh.read())
                dropped = max(len(lines) - max(max_lines, 0), 0)
                if dropped:
                    self._replace_contents(fh, _join_lines(lines[dropped:]))
        except FileNotFoundError:
            return False
        except OSError as e:
            self._fail("trim", "log file trim failed", e)
            return False
        return dropped > 0

    def read_bytes(self) -> bytes:
        """Return the whole file.

        Raises:
            LogFileNotFoundError: If the file is absent or unreadable.
        """
        try:
            with self._locked("rb", shared=True) as fh:
                return fh.read()
        except FileNotFoundError as e:
            raise LogFileNotFoundError("File not found.", path=str(self._path)) from e
        except OSError as e:
            raise LogFileNotFoundError("Cannot read file.", path=str(self._path)) from e

    def line_count(self) -> int:
        """Number of lines currently in the file (0 when absent)."""
        try:
            return len(_split_lines(self.read_bytes()))
        except LogFileNotFoundError:
            return 0
