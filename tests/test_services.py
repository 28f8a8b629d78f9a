import hashlib
from datetime import timezone

import pytest

from app.analyzer import analyze_string, compute_sha256, count_words, is_palindrome
from app.db import StringStore
from app.services import (
    ConflictingFiltersError,
    InvalidFilterError,
    QueryParseError,
    StringAlreadyExistsError,
    StringNotFoundError,
    create_string,
    delete_string_by_value,
    get_all_strings_with_filters,
    get_string_by_value,
    get_strings_by_natural_language,
    validate_query_filters,
)


class TestAnalyzeString:
    """Tests for property computation."""

    def test_basic_analysis(self):
        props = analyze_string("hello world")
        assert props["length"] == 11
        assert props["word_count"] == 2
        assert props["is_palindrome"] is False
        assert props["unique_characters"] == 8  # Includes space as a character

    def test_palindrome_is_case_insensitive(self):
        assert analyze_string("Racecar")["is_palindrome"] is True

    def test_spaces_count_for_palindromes(self):
        assert is_palindrome("nurses run") is False
        assert is_palindrome("a b a") is True

    def test_empty_string(self):
        props = analyze_string("")
        assert props["length"] == 0
        assert props["word_count"] == 0
        assert props["is_palindrome"] is True
        assert props["character_frequency_map"] == {}

    def test_character_frequency_includes_spaces(self):
        freq_map = analyze_string("hello world")["character_frequency_map"]
        assert freq_map[" "] == 1
        assert freq_map["l"] == 3
        assert freq_map["o"] == 2

    def test_frequency_is_case_sensitive(self):
        assert analyze_string("Aa")["character_frequency_map"] == {"A": 1, "a": 1}

    def test_word_count_ignores_surrounding_and_repeated_whitespace(self):
        assert count_words("  one \t two\n\nthree  ") == 3
        assert count_words("   ") == 0

    def test_sha256_hash_of_original(self):
        expected_hash = hashlib.sha256("Hello".encode("utf-8")).hexdigest()
        assert analyze_string("Hello")["sha256_hash"] == expected_hash
        assert compute_sha256("Hello") == expected_hash


class TestStringStore:
    def test_add_exists_get(self, store):
        record = create_string("hello", store)
        assert store.exists(record.id)
        assert store.get_by_hash(record.id) == record
        assert store.count() == 1

    def test_missing_hash(self, store):
        assert store.exists("nope") is False
        assert store.get_by_hash("nope") is None

    def test_delete_reports_whether_removed(self, store):
        record = create_string("hello", store)
        assert store.delete(record.id) is True
        assert store.delete(record.id) is False
        assert store.count() == 0

    def test_filter_empty_matches_all(self, store):
        create_string("one", store)
        create_string("two", store)
        assert len(store.filter({})) == 2

    def test_filter_is_conjunction(self, store):
        create_string("racecar", store)
        create_string("level", store)
        create_string("hello", store)
        results = store.filter({"is_palindrome": True, "min_length": 6})
        assert [r.value for r in results] == ["racecar"]

    def test_filter_bounds_are_inclusive(self, store):
        create_string("abcde", store)
        assert len(store.filter({"min_length": 5, "max_length": 5})) == 1

    def test_negative_max_length_matches_nothing(self, store):
        create_string("", store)
        assert store.filter({"max_length": -1}) == []

    def test_contains_character_is_case_sensitive(self, store):
        create_string("Apple", store)
        assert store.filter({"contains_character": "a"}) == []
        assert len(store.filter({"contains_character": "A"})) == 1

    def test_clear(self, store):
        create_string("x", store)
        store.clear()
        assert store.get_all() == []

    def test_stores_are_independent(self):
        first, second = StringStore(), StringStore()
        create_string("only here", first)
        assert second.count() == 0


class TestCreateString:
    def test_create_new_string(self, store):
        record = create_string("test string", store)
        assert record.value == "test string"
        assert record.id == compute_sha256("test string")
        assert record.properties.model_dump() == analyze_string("test string")
        assert record.created_at.tzinfo == timezone.utc
        assert store.count() == 1

    def test_duplicate_raises_error(self, store):
        create_string("test string", store)
        with pytest.raises(StringAlreadyExistsError, match="already exists"):
            create_string("test string", store)

    def test_exact_duplicates_conflict_only(self, store):
        create_string("Test String", store)
        create_string("test string", store)
        assert store.count() == 2


class TestLookupAndDelete:
    def test_get_by_value(self, store):
        created = create_string("find me", store)
        assert get_string_by_value("find me", store) == created

    def test_get_missing(self, store):
        with pytest.raises(StringNotFoundError):
            get_string_by_value("absent", store)

    def test_delete_by_value(self, store):
        create_string("bye", store)
        delete_string_by_value("bye", store)
        with pytest.raises(StringNotFoundError):
            delete_string_by_value("bye", store)


class TestValidateQueryFilters:
    def test_no_parameters(self):
        assert validate_query_filters() == {}

    def test_all_parameters(self):
        filters = validate_query_filters("false", "1", "10", "2", "z")
        assert filters == {
            "is_palindrome": False,
            "min_length": 1,
            "max_length": 10,
            "word_count": 2,
            "contains_character": "z",
        }

    @pytest.mark.parametrize("value", ["True", "1", "yes", ""])
    def test_is_palindrome_must_be_true_or_false(self, value):
        with pytest.raises(InvalidFilterError, match="is_palindrome"):
            validate_query_filters(is_palindrome=value)

    @pytest.mark.parametrize("value", ["-1", "abc", "1.5", "", "5abc"])
    def test_lengths_must_be_non_negative_integers(self, value):
        with pytest.raises(InvalidFilterError, match="min_length"):
            validate_query_filters(min_length=value)

    def test_word_count_zero_is_allowed(self):
        assert validate_query_filters(word_count="0") == {"word_count": 0}

    @pytest.mark.parametrize("value", ["", "ab"])
    def test_contains_character_must_be_single(self, value):
        with pytest.raises(InvalidFilterError, match="contains_character"):
            validate_query_filters(contains_character=value)

    def test_min_greater_than_max_is_passed_through(self):
        assert validate_query_filters(min_length="10", max_length="5") == {"min_length": 10, "max_length": 5}


class TestFilterServices:
    def test_filters_applied_echoed(self, store):
        create_string("hello", store)
        create_string("racecar", store)
        result = get_all_strings_with_filters(store, {"is_palindrome": True})
        assert result["count"] == 1
        assert result["filters_applied"] == {"is_palindrome": True}

    def test_natural_language(self, store):
        create_string("a", store)
        create_string("racecar", store)
        create_string("hello world", store)
        result = get_strings_by_natural_language(store, "single word palindromes")
        assert result["count"] == 2
        assert result["interpreted_query"] == {
            "original": "single word palindromes",
            "parsed_filters": {"is_palindrome": True, "word_count": 1},
        }

    def test_natural_language_unparseable(self, store):
        with pytest.raises(QueryParseError, match="no valid filters extracted"):
            get_strings_by_natural_language(store, "gibberish")

    def test_natural_language_conflict(self, store):
        with pytest.raises(ConflictingFiltersError) as excinfo:
            get_strings_by_natural_language(store, "longer than 10 and shorter than 5")
        assert excinfo.value.conflicts == ["min_length is greater than max_length"]
