"""
Base class for telemetry collectors.

Gives every collector a name, a time budget and collection statistics.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar
import logging

from zfs_telemetry.telemetry.schemas import CollectorStats

logger = logging.getLogger(__name__)

# Type variable for the collection result
T = TypeVar("T")


class BaseCollector(ABC, Generic[T]):
    """
    Abstract base class for telemetry collectors.

    Subclasses implement collect(); the base class keeps the bookkeeping
    used by health endpoints.
    """

    def __init__(self, name: str, timeout_seconds: float = 10.0):
        """
        Initialize base collector.

        Args:
            name: Collector name for logging and identification
            timeout_seconds: Time budget for one whole collection
        """
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")

        self.name = name
        self.timeout_seconds = timeout_seconds
        self._last_collection_time: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._collection_count = 0
        self._error_count = 0

    @abstractmethod
    async def collect(self) -> T:
        """
        Collect from the source.

        Promises:
        - Completes within timeout_seconds
        - Reports failures in the result rather than raising
        """
        pass

    def _record_collection(self, error: Optional[str] = None) -> None:
        self._collection_count += 1
        self._last_collection_time = datetime.now(timezone.utc)
        if error is not None:
            self._error_count += 1
            self._last_error = error

    def get_stats(self) -> CollectorStats:
        """Get collector statistics."""
        return CollectorStats(
            name=self.name,
            collections=self._collection_count,
            errors=self._error_count,
            error_rate=self._error_count / max(1, self._collection_count),
            last_collection=self._last_collection_time.isoformat()
            if self._last_collection_time
            else None,
            last_error=self._last_error,
        )

    def reset_stats(self) -> None:
        """Reset collector statistics."""
        self._collection_count = 0
        self._error_count = 0
        self._last_error = None
