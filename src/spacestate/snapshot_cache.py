"""
Token-based memoization for a single snapshot.

Each Space owns one SnapshotCache. The cache holds the last composed snapshot
together with the token it was computed under; invalidate() advances the token
so the next read recomputes.
"""
from typing import Callable, Generic, TypeVar

T = TypeVar('T')

# None is a legitimate snapshot (a Space may hold None), so emptiness needs its own marker
_EMPTY = object()


class SnapshotCache(Generic[T]):
    """
    Single-value cache invalidated by advancing a token.

    Example:
        cache = SnapshotCache()
        snapshot = cache.get_or_compute(lambda: compose())
        cache.invalidate()   # next get_or_compute() recomputes
    """

    def __init__(self):
        self._cached_value = _EMPTY
        self._cached_token: int = -1
        self._token: int = 0

    @property
    def token(self) -> int:
        """Number of invalidations so far."""
        return self._token

    @property
    def is_valid(self) -> bool:
        return self._cached_value is not _EMPTY and self._cached_token == self._token

    def get_or_compute(self, compute_fn: Callable[[], T]) -> T:
        """
        Get cached value or compute and cache it.

        Args:
            compute_fn: Function to compute value if cache miss

        Returns:
            Cached or computed value
        """
        if self.is_valid:
            return self._cached_value

        value = compute_fn()
        self._cached_value = value
        self._cached_token = self._token
        return value

    def invalidate(self) -> None:
        """Drop the cached value and advance the token."""
        self._cached_value = _EMPTY
        self._token += 1
