import threading
from typing import Any, Dict, List, Mapping, Optional

from .schemas import StringRecord


class StringStore:
    """In-memory records keyed by sha256 hash of the value.

    One instance is created per application by ``create_app`` and held on
    ``app.state.store``. Sync endpoints run in a thread pool, so every access
    to the mapping goes through the lock.
    """

    def __init__(self) -> None:
        self._records: Dict[str, StringRecord] = {}
        self._lock = threading.RLock()

    def add(self, record: StringRecord) -> StringRecord:
        with self._lock:
            self._records[record.id] = record
        return record

    def exists(self, hash_value: str) -> bool:
        with self._lock:
            return hash_value in self._records

    def get_by_hash(self, hash_value: str) -> Optional[StringRecord]:
        with self._lock:
            return self._records.get(hash_value)

    def delete(self, hash_value: str) -> bool:
        """Remove a record. Returns False when nothing was stored under the hash."""
        with self._lock:
            return self._records.pop(hash_value, None) is not None

    def get_all(self) -> List[StringRecord]:
        with self._lock:
            return list(self._records.values())

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def filter(self, filters: Mapping[str, Any]) -> List[StringRecord]:
        """Return records matching every predicate present in ``filters``."""
        return [r for r in self.get_all() if _matches_filters(r, filters)]


def _matches_filters(record: StringRecord, filters: Mapping[str, Any]) -> bool:
    props = record.properties

    if "is_palindrome" in filters:
        if props.is_palindrome != filters["is_palindrome"]:
            return False

    if "min_length" in filters:
        if props.length < filters["min_length"]:
            return False

    if "max_length" in filters:
        if props.length > filters["max_length"]:
            return False

    if "word_count" in filters:
        if props.word_count != filters["word_count"]:
            return False

    if "contains_character" in filters:
        if filters["contains_character"] not in record.value:
            return False

    return True
