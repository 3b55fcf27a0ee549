"""Build lock serializing toolchain invocations.

Only one toolchain run may be in flight per lock. The toolchain's own
output-directory and dependency-cache locking is not relied upon, so
callers building different configurations still queue behind each other.

A critical section that exits through an unexpected exception leaves the
lock *poisoned*. The lock is always released; the next acquirer detects
the poisoned state and explicitly resets it, so one crashed build never
wedges later ones.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from wasm_build.builds.errors import BuildError

logger = logging.getLogger(__name__)


class BuildLock:
    """Reentrant mutual-exclusion handle shared by orchestrators.

    Attributes:
        name: Label used in log messages.
    """

    def __init__(self, name: str = "build") -> None:
        self.name = name
        self._lock = threading.RLock()
        self._poisoned = False

    @property
    def poisoned(self) -> bool:
        """Whether the last holder left the critical section abnormally."""
        return self._poisoned

    def reset(self) -> None:
        """Forcibly clear the poisoned state."""
        with self._lock:
            self._poisoned = False

    def acquire(self) -> None:
        """Block until the lock is held, recovering from poisoning."""
        self._lock.acquire()
        if self._poisoned:
            logger.warning(
                "Build lock '%s' was left poisoned by an aborted build; resetting",
                self.name,
            )
            self.reset()

    def release(self) -> None:
        """Release one level of ownership."""
        self._lock.release()

    @contextmanager
    def held(self) -> Iterator[None]:
        """Hold the lock for the duration of the block.

        BuildError exits are ordinary failures. Any other exception,
        including KeyboardInterrupt, marks the lock poisoned before it
        is released and propagates unchanged.

        Yields:
            None while the lock is held.
        """
        logger.debug("Acquiring build lock '%s'", self.name)
        self.acquire()
        logger.debug("Build lock '%s' acquired", self.name)
        try:
            yield
        except BuildError:
            raise
        except BaseException:
            self._poisoned = True
            raise
        finally:
            self.release()
            logger.debug("Build lock '%s' released", self.name)


_default_lock = BuildLock("global")


def default_build_lock() -> BuildLock:
    """Return the process-wide default build lock."""
    return _default_lock


__all__ = ["BuildLock", "default_build_lock"]
