"""Shared read/write helpers for services that persist records in the key-value store."""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from vocabtrack.exceptions import StoreError
from vocabtrack.monitoring import store_errors
from vocabtrack.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Raised by from_data() when a stored document does not have the expected shape
MALFORMED_RECORD_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


@dataclass
class LoadResult(Generic[T]):
    """Outcome of a store read: a value, nothing stored, or a failure."""
    value: Optional[T] = None
    failed: bool = False

    @property
    def found(self) -> bool:
        return self.value is not None


class StoreBackedService:
    """Base class turning store failures into results instead of exceptions.

    Public operations of the subclasses never raise for I/O problems; they
    branch on these results and fall back to defaults instead.
    """

    def __init__(self, store: KeyValueStore):
        """Initialize the service with a key-value store."""
        self.store = store

    async def _load(self, key: str, parser: Callable[[Any], T]) -> LoadResult[T]:
        """Read and parse ``key``."""
        try:
            data = await self.store.get(key)
        except StoreError as e:
            logger.error(f"Failed to read {key}: {e}")
            return LoadResult(failed=True)
        if data is None:
            logger.debug(f"No value stored under {key}")
            return LoadResult()
        try:
            return LoadResult(value=parser(data))
        except MALFORMED_RECORD_ERRORS as e:
            store_errors.labels(error_type=type(e).__name__).inc()
            logger.error(f"Malformed record stored under {key}: {e!r}")
            return LoadResult(failed=True)

    async def _save(self, key: str, data: Any) -> bool:
        """Overwrite ``key``. Returns False if the write failed."""
        try:
            await self.store.set(key, data)
            return True
        except StoreError as e:
            logger.error(f"Failed to write {key}: {e}")
            return False
