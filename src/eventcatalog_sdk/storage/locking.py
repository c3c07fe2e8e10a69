"""Advisory locks guarding writes to a single document.

A lock is an exclusive ``flock`` on a file under the catalog's lock
directory. Its name is derived from the target document path, so two
writers of the same document contend while writers of different
documents never do. The kernel drops the lock when the holding process
exits, so a crashed writer never wedges a document. Lock files are left
in place; only the ``flock`` on them matters.
"""

import asyncio
import fcntl
import hashlib
import logging
import os
from pathlib import Path
from typing import IO, Any

from eventcatalog_sdk.errors import LockTimeout

logger = logging.getLogger(__name__)


def lock_key(root: Path, document: Path) -> str:
    """Stable lock filename for a document path."""
    try:
        relative = document.relative_to(root).as_posix()
    except ValueError:
        relative = document.as_posix()
    return hashlib.sha1(relative.encode("utf-8")).hexdigest() + ".lock"


class DocumentLock:
    """Async context manager holding the write lock of one document.

    ``id``, ``version`` and ``resource_type`` only label the
    :class:`LockTimeout` raised when the lock stays busy.
    """

    def __init__(
        self,
        path: Path,
        *,
        retries: int = 20,
        retry_interval: float = 0.05,
        id: str | None = None,
        version: str | None = None,
        resource_type: str | None = None,
    ) -> None:
        self._path = path
        self._retries = retries
        self._retry_interval = retry_interval
        self._id = id
        self._version = version
        self._resource_type = resource_type
        self._handle: IO[str] | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def held(self) -> bool:
        return self._handle is not None

    def _try_lock(self) -> bool:
        handle = self._path.open("a+", encoding="utf-8")
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            handle.close()
            return False
        except BaseException:
            handle.close()
            raise
        handle.seek(0)
        handle.truncate()
        handle.write(f"{os.getpid()}\n")
        handle.flush()
        self._handle = handle
        return True

    async def acquire(self) -> None:
        """Acquire the lock, retrying a bounded number of times.

        Raises:
            LockTimeout: If the lock is still held by someone else after
                all retries.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        for attempt in range(self._retries + 1):
            if await asyncio.to_thread(self._try_lock):
                logger.debug("lock acquired path=%s attempt=%d", self._path, attempt)
                return
            if attempt < self._retries:
                await asyncio.sleep(self._retry_interval)

        raise LockTimeout(
            f"Could not acquire lock {self._path} after {self._retries} retries",
            id=self._id,
            version=self._version,
            resource_type=self._resource_type,
        )

    def release(self) -> None:
        """Release the lock if held."""
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        finally:
            handle.close()
        logger.debug("lock released path=%s", self._path)

    async def __aenter__(self) -> "DocumentLock":
        await self.acquire()
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        self.release()
