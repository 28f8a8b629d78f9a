import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.analyzer import analyze_string, compute_sha256
from app.db import StringStore
from app.NLP import ParseFailure, parse_query
from app.schemas import StringProperties, StringRecord

logger = logging.getLogger("string_analyzer.services")

_BOOL_VALUES = {"true": True, "false": False}


class StringAlreadyExistsError(ValueError):
    pass


class StringNotFoundError(ValueError):
    pass


class InvalidFilterError(ValueError):
    """A query parameter could not be converted to a filter value."""


class QueryParseError(ValueError):
    """A natural language query yielded no filters."""


class ConflictingFiltersError(ValueError):
    def __init__(self, message: str, conflicts: List[str]):
        super().__init__(message)
        self.conflicts = conflicts


def create_string(value: str, store: StringStore) -> StringRecord:
    hash_val = compute_sha256(value)
    if store.exists(hash_val):
        raise StringAlreadyExistsError("String already exists in the system")

    record = StringRecord(
        id=hash_val,
        value=value,
        properties=StringProperties(**analyze_string(value)),
        created_at=datetime.now(timezone.utc),
    )
    store.add(record)
    logger.info("Stored string %s (length=%d)", hash_val[:12], record.properties.length)
    return record


def get_string_by_value(string_value: str, store: StringStore) -> StringRecord:
    """Lookup record by hashing the exact provided string value."""
    record = store.get_by_hash(compute_sha256(string_value))
    if record is None:
        raise StringNotFoundError("String does not exist in the system")
    return record


def delete_string_by_value(string_value: str, store: StringStore) -> None:
    string_hash = compute_sha256(string_value)
    if not store.delete(string_hash):
        raise StringNotFoundError("String does not exist in the system")
    logger.info("Deleted string %s", string_hash[:12])


def _non_negative_int(name: str, raw: str) -> int:
    if not (raw.isascii() and raw.isdigit()):
        raise InvalidFilterError(f'Invalid value for "{name}" parameter. Must be a non-negative integer')
    return int(raw)


def validate_query_filters(
    is_palindrome: Optional[str] = None,
    min_length: Optional[str] = None,
    max_length: Optional[str] = None,
    word_count: Optional[str] = None,
    contains_character: Optional[str] = None,
) -> Dict[str, Any]:
    """Convert raw query string values into a filter set."""
    filters: Dict[str, Any] = {}

    if is_palindrome is not None:
        if is_palindrome not in _BOOL_VALUES:
            raise InvalidFilterError('Invalid value for "is_palindrome" parameter. Must be "true" or "false"')
        filters["is_palindrome"] = _BOOL_VALUES[is_palindrome]

    if min_length is not None:
        filters["min_length"] = _non_negative_int("min_length", min_length)

    if max_length is not None:
        filters["max_length"] = _non_negative_int("max_length", max_length)

    if word_count is not None:
        filters["word_count"] = _non_negative_int("word_count", word_count)

    if contains_character is not None:
        if len(contains_character) != 1:
            raise InvalidFilterError(
                'Invalid value for "contains_character" parameter. Must be a single character'
            )
        filters["contains_character"] = contains_character

    return filters


def get_all_strings_with_filters(store: StringStore, filters: Dict[str, Any]) -> Dict[str, Any]:
    records = store.filter(filters)
    return {
        "data": records,
        "count": len(records),
        "filters_applied": filters,
    }


def get_strings_by_natural_language(store: StringStore, query: str) -> Dict[str, Any]:
    result = parse_query(query)
    if isinstance(result, ParseFailure):
        logger.warning("Could not interpret query %r: %s", query, result.reason)
        raise QueryParseError(result.reason)

    if result.conflicts:
        logger.warning("Query %r produced conflicting filters: %s", query, result.conflicts)
        raise ConflictingFiltersError("Query parsed but resulted in conflicting filters", result.conflicts)

    records = store.filter(result.filters)
    return {
        "data": records,
        "count": len(records),
        "interpreted_query": {
            "original": query,
            "parsed_filters": result.filters,
        },
    }
