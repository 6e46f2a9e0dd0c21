"""Single-writer guard for the persisted conversation context.

An advisory ``flock`` on a sibling ``.lock`` file. The lock is released by
the kernel when the process exits, so a crashed invocation never leaves a
stale lock behind.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import TracebackType

try:
    import fcntl
except ImportError:  # pragma: no cover - platforms without flock
    fcntl = None  # type: ignore[assignment]

from kysy.core.errors import ContextLocked, PersistenceError

logger = logging.getLogger(__name__)


class FileLock:
    """Non-blocking exclusive lock; raises ``ContextLocked`` when held elsewhere."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._fd: int | None = None

    def acquire(self) -> None:
        if fcntl is None:
            logger.debug("Advisory locking unavailable; %s not guarded", self.path)
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o600)
        except OSError as e:
            raise PersistenceError(f"Unable to open lock file {self.path}: {e}") from e
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            os.close(fd)
            raise ContextLocked(
                f"Another kysy invocation is using {self.path.with_suffix('')}; "
                "wait for it to finish."
            ) from e
        self._fd = fd
        logger.debug("Acquired context lock %s", self.path)

    def release(self) -> None:
        if self._fd is None:
            return
        fcntl.flock(self._fd, fcntl.LOCK_UN)
        os.close(self._fd)
        self._fd = None
        logger.debug("Released context lock %s", self.path)

    @property
    def locked(self) -> bool:
        return self._fd is not None

    def __enter__(self) -> FileLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
