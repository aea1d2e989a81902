"""Process-wide deployment gate."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from webhook_deployer.core.exceptions import DeploymentAlreadyInProgressError


class DeploymentLock:
    """Admits at most one deployment at a time.

    Not reentrant and not queued: a second caller is rejected immediately.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    def acquire(self) -> None:
        """Mark the lock held, or raise if a deployment is in flight."""
        if not self._lock.acquire(blocking=False):
            raise DeploymentAlreadyInProgressError()

    def release(self) -> None:
        """Mark the lock free. Safe to call when already free."""
        if self._lock.locked():
            self._lock.release()

    @contextmanager
    def held(self) -> Iterator[None]:
        self.acquire()
        try:
            yield
        finally:
            self.release()
