"""
Object Pool for recycling expensive-to-create objects

Keeps every instance it has produced in exactly one of two collections:
available (deactivated, waiting for reuse) and active (handed out to a caller).
Instances are never destroyed; release() only deactivates and parks them.

Usage:
    pool = ObjectPool(
        factory=lambda: Sprite(),
        deactivate=lambda s: s.hide(),
        activate=lambda s: s.show(),
        prewarm_count=8,
    )

    sprite = pool.acquire()
    sprite.move_to(10, 20)

    # Return to pool (deactivates, keeps the instance for the next acquire)
    pool.release(sprite)

Threading:
    ObjectPool does no locking. Wrap it in SynchronizedObjectPool when it is
    shared between threads.
"""

import contextlib
import logging
import threading
from collections import deque
from typing import Callable, Deque, Dict, Generic, Iterator, List, Optional, Set, TypeVar

from config_loader import SELECTION_POLICIES, Config, get_config
from errors import InvalidPoolState

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ObjectPool(Generic[T]):
    """
    Two-set object pool with activation hooks

    acquire() reuses an available instance (calling activate on it) or, when
    none is available, builds a new one with factory (no activate call).
    release() calls deactivate and moves the instance back to available.

    Selection policy for reuse:
    - "fifo": oldest released instance first (default)
    - "lifo": most recently released instance first

    Membership is tracked by identity, so instances with custom __eq__ or
    unhashable instances (dicts, lists) are handled correctly.
    """

    def __init__(
        self,
        factory: Callable[[], T],
        deactivate: Callable[[T], None],
        activate: Callable[[T], None],
        prewarm_count: int = 0,
        selection_policy: str = "fifo",
        name: str = "pool",
        track_stats: bool = True,
        log_operations: bool = False,
    ):
        """
        Initialize object pool

        Args:
            factory: Builds a new, already usable instance
            deactivate: Makes an instance inert before it is parked
            activate: Reverses deactivate before an instance is handed out again
            prewarm_count: Instances to build and deactivate up front
            selection_policy: "fifo" or "lifo" reuse order
            name: Label used in logs, stats and errors
            track_stats: Count acquires/releases/creates/reuses
            log_operations: Emit a debug line per acquire/release

        Raises:
            ValueError: If prewarm_count is negative or the policy is unknown
        """
        if prewarm_count < 0:
            raise ValueError(f"prewarm_count must be >= 0, got {prewarm_count}")
        if selection_policy not in SELECTION_POLICIES:
            raise ValueError(
                f"selection_policy must be one of {list(SELECTION_POLICIES)}, got {selection_policy}"
            )

        self.factory = factory
        self.deactivate = deactivate
        self.activate = activate
        self.selection_policy = selection_policy
        self.name = name
        self.track_stats = track_stats
        self.log_operations = log_operations

        self._available: Deque[T] = deque()
        self._active: List[T] = []
        self._active_ids: Set[int] = set()

        # Statistics for monitoring reuse
        self.stats_acquires = 0
        self.stats_releases = 0
        self.stats_creates = 0
        self.stats_reuses = 0

        for _ in range(prewarm_count):
            instance = self._create()
            self.deactivate(instance)
            self._available.append(instance)

        logger.info(
            f"ObjectPool '{self.name}' initialized: prewarmed={prewarm_count}, "
            f"policy={self.selection_policy}"
        )

    @classmethod
    def from_config(
        cls,
        factory: Callable[[], T],
        deactivate: Callable[[T], None],
        activate: Callable[[T], None],
        config: Optional[Config] = None,
        name: str = "pool",
    ) -> "ObjectPool[T]":
        """Build a pool using the object_pool section of the runtime config"""
        cfg = config or get_config()
        return cls(
            factory,
            deactivate,
            activate,
            prewarm_count=cfg.prewarm_count,
            selection_policy=cfg.selection_policy,
            name=name,
            track_stats=cfg.track_stats,
            log_operations=cfg.log_operations,
        )

    def _create(self) -> T:
        instance = self.factory()
        if self.track_stats:
            self.stats_creates += 1
        return instance

    def acquire(self) -> T:
        """
        Get an instance from the pool (or create a new one if none is available)

        Exactly one of activate/factory is called. If that call raises, the
        exception propagates and pool membership is unchanged.

        Returns:
            Reused (activated) instance or a freshly built one
        """
        if self._available:
            instance = self._available[0] if self.selection_policy == "fifo" else self._available[-1]
            self.activate(instance)
            if self.selection_policy == "fifo":
                self._available.popleft()
            else:
                self._available.pop()
            reused = True
        else:
            instance = self._create()
            reused = False

        self._active.append(instance)
        self._active_ids.add(id(instance))

        if self.track_stats:
            self.stats_acquires += 1
            if reused:
                self.stats_reuses += 1

        if self.log_operations:
            logger.debug(
                f"ObjectPool '{self.name}' acquire ({'reused' if reused else 'created'}): "
                f"active={len(self._active)}, available={len(self._available)}"
            )

        return instance

    def release(self, instance: T) -> None:
        """
        Return an active instance to the pool

        Args:
            instance: Object previously returned by acquire() and not yet released

        Raises:
            InvalidPoolState: If instance is not currently active (unknown
                instance or double release). The pool is left untouched.
        """
        if id(instance) not in self._active_ids:
            logger.warning(f"ObjectPool '{self.name}' refused release of an inactive instance")
            raise InvalidPoolState(instance, self.name)

        self.deactivate(instance)

        for index, candidate in enumerate(self._active):
            if candidate is instance:
                del self._active[index]
                break
        self._active_ids.discard(id(instance))
        self._available.append(instance)

        if self.track_stats:
            self.stats_releases += 1

        if self.log_operations:
            logger.debug(
                f"ObjectPool '{self.name}' release: "
                f"active={len(self._active)}, available={len(self._available)}"
            )

    @contextlib.contextmanager
    def borrow(self) -> Iterator[T]:
        """Acquire an instance for the duration of a with-block"""
        instance = self.acquire()
        try:
            yield instance
        finally:
            self.release(instance)

    def active_snapshot(self) -> List[T]:
        """
        Live list of active instances

        This is the pool's own list, not a copy. Its contents change with later
        acquire()/release() calls and it must not be mutated by callers.
        """
        return self._active

    def active_count(self) -> int:
        return len(self._active)

    def available_count(self) -> int:
        return len(self._available)

    def is_active(self, instance: T) -> bool:
        return id(instance) in self._active_ids

    def __contains__(self, instance: object) -> bool:
        return id(instance) in self._active_ids

    def __len__(self) -> int:
        # Every instance the pool owns
        return len(self._active) + len(self._available)

    def get_stats(self) -> Dict[str, object]:
        """
        Get pool statistics for monitoring

        Returns:
            Dictionary with pool statistics:
            - name: Pool label
            - active / available: Current membership sizes
            - selection_policy: Reuse order
            - acquires / releases: Total calls
            - creates: factory calls (including prewarm)
            - reuses: acquires served from available
            - hit_rate: reuses / acquires (0.0-1.0)
        """
        hit_rate = (
            self.stats_reuses / self.stats_acquires
            if self.stats_acquires > 0
            else 0.0
        )

        return {
            "name": self.name,
            "active": len(self._active),
            "available": len(self._available),
            "selection_policy": self.selection_policy,
            "acquires": self.stats_acquires,
            "releases": self.stats_releases,
            "creates": self.stats_creates,
            "reuses": self.stats_reuses,
            "hit_rate": hit_rate,
        }

    def reset_stats(self) -> None:
        """Reset statistics counters (membership is kept)"""
        self.stats_acquires = 0
        self.stats_releases = 0
        self.stats_creates = 0
        self.stats_reuses = 0


class SynchronizedObjectPool(Generic[T]):
    """
    Lock-guarded handle around an ObjectPool

    Every call takes a threading.Lock, including the caller's factory,
    activate and deactivate callables, so keep them short.
    """

    def __init__(self, pool: ObjectPool[T]):
        self.pool = pool
        self.lock = threading.Lock()

    def acquire(self) -> T:
        with self.lock:
            return self.pool.acquire()

    def release(self, instance: T) -> None:
        with self.lock:
            self.pool.release(instance)

    @contextlib.contextmanager
    def borrow(self) -> Iterator[T]:
        """Thread-safe version of ObjectPool.borrow()"""
        instance = self.acquire()
        try:
            yield instance
        finally:
            self.release(instance)

    def active_snapshot(self) -> List[T]:
        """Copy of the active list taken under the lock"""
        with self.lock:
            return list(self.pool.active_snapshot())

    def active_count(self) -> int:
        with self.lock:
            return self.pool.active_count()

    def available_count(self) -> int:
        with self.lock:
            return self.pool.available_count()

    def get_stats(self) -> Dict[str, object]:
        with self.lock:
            return self.pool.get_stats()
