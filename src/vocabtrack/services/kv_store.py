"""Key-value store the progress records are persisted in.

Values are JSON documents. The store knows nothing about their shape; the
key builders below define the namespace the record services use.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocabtrack.config import settings
from vocabtrack.exceptions import StoreError
from vocabtrack.models.models import KeyValueEntry
from vocabtrack.models.record_models import PracticeMode
from vocabtrack.monitoring import store_errors, store_operations

logger = logging.getLogger(__name__)

DAY_INDEX_KEY = "dayRecords.totalRecords"


def main_record_key(dict_id: str, practice_mode: PracticeMode) -> str:
    return f"records.{dict_id}.{practice_mode.value}.main"


def chapter_record_key(dict_id: str, chapter_number: int, practice_mode: PracticeMode) -> str:
    return f"records.{dict_id}.{practice_mode.value}.ch{chapter_number}"


def day_record_key(date: str, practice_mode: PracticeMode) -> str:
    """Normal mode has no suffix, other modes append ``_<mode>``."""
    suffix = "" if practice_mode == PracticeMode.NORMAL else f"_{practice_mode.value}"
    return f"dayRecords.{date}{suffix}"


def analysis_key(date: str) -> str:
    return f"dayRecordsAnalyze.{date}_analysis"


def encode_value(key: str, value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        store_errors.labels(error_type=type(e).__name__).inc()
        raise StoreError(f"Value for {key} is not JSON serializable: {e}", key) from e


def decode_value(key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        store_errors.labels(error_type=type(e).__name__).inc()
        raise StoreError(f"Stored value for {key} is not valid JSON: {e}", key) from e


class KeyValueStore(ABC):
    """Host-provided get/set store with an optional key namespace."""

    def __init__(self, namespace: Optional[str] = None):
        if namespace is None:
            namespace = settings.records.key_namespace
        self.namespace = namespace

    def _full_key(self, key: str) -> str:
        return f"{self.namespace}.{key}" if self.namespace else key

    def _strip_namespace(self, full_key: str) -> Optional[str]:
        if not self.namespace:
            return full_key
        prefix = f"{self.namespace}."
        return full_key[len(prefix):] if full_key.startswith(prefix) else None

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the decoded value, or None when the key is absent."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Overwrite the value stored under key."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    async def list_keys(self) -> List[str]:
        """All keys inside this store's namespace."""
        raise NotImplementedError("Subclasses must implement this method")


class SQLAlchemyKeyValueStore(KeyValueStore):
    """Store backed by the ``key_values`` table."""

    def __init__(self, db: Session, namespace: Optional[str] = None):
        super().__init__(namespace)
        self.db = db

    async def get(self, key: str) -> Optional[Any]:
        store_operations.labels(operation_type="get").inc()
        full_key = self._full_key(key)
        try:
            entry = self.db.query(KeyValueEntry).filter(KeyValueEntry.key == full_key).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            store_errors.labels(error_type=type(e).__name__).inc()
            raise StoreError(f"Failed to read {full_key}: {e}", key) from e
        if entry is None:
            return None
        return decode_value(key, entry.value)

    async def set(self, key: str, value: Any) -> None:
        store_operations.labels(operation_type="set").inc()
        full_key = self._full_key(key)
        raw = encode_value(key, value)
        try:
            entry = self.db.query(KeyValueEntry).filter(KeyValueEntry.key == full_key).first()
            if entry is None:
                self.db.add(KeyValueEntry(key=full_key, value=raw))
            else:
                entry.value = raw
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            store_errors.labels(error_type=type(e).__name__).inc()
            raise StoreError(f"Failed to write {full_key}: {e}", key) from e

    async def list_keys(self) -> List[str]:
        store_operations.labels(operation_type="list_keys").inc()
        try:
            rows = self.db.query(KeyValueEntry.key).order_by(KeyValueEntry.key).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            store_errors.labels(error_type=type(e).__name__).inc()
            raise StoreError(f"Failed to list keys: {e}") from e
        keys = (self._strip_namespace(row[0]) for row in rows)
        return [key for key in keys if key is not None]


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store that keeps the encoded JSON text per key."""

    def __init__(self, namespace: Optional[str] = None):
        super().__init__(namespace)
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        store_operations.labels(operation_type="get").inc()
        raw = self._data.get(self._full_key(key))
        if raw is None:
            return None
        return decode_value(key, raw)

    async def set(self, key: str, value: Any) -> None:
        store_operations.labels(operation_type="set").inc()
        self._data[self._full_key(key)] = encode_value(key, value)

    async def list_keys(self) -> List[str]:
        store_operations.labels(operation_type="list_keys").inc()
        keys = (self._strip_namespace(key) for key in sorted(self._data))
        return [key for key in keys if key is not None]
