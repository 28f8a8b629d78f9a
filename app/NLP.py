"""Rule-based translation of natural language queries into filter sets.

Rules are grouped by the filter category they write and evaluated in a fixed
order. Changing the order changes the result for ambiguous queries such as
"at least 3 characters, exactly 5 characters" or "first vowel and fifth
vowel", so new rules go where their precedence demands, not at the end.
"""
import re
from dataclasses import dataclass, field
from re import Match, Pattern
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

NO_FILTERS_REASON = "no valid filters extracted"
EMPTY_QUERY_REASON = "query must not be empty"
MIN_GREATER_THAN_MAX = "min_length is greater than max_length"

Filters = Dict[str, Any]


@dataclass(frozen=True)
class ParseSuccess:
    filters: Filters
    conflicts: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParseFailure:
    reason: str


ParseResult = Union[ParseSuccess, ParseFailure]


@dataclass(frozen=True)
class Rule:
    """A pattern and the filter fields it sets when it matches."""
    pattern: Pattern[str]
    apply: Callable[[Match[str]], Filters]

    def match(self, query: str) -> Optional[Filters]:
        m = self.pattern.search(query)
        if m is None:
            return None
        return self.apply(m)


def _number(m: Match[str]) -> int:
    # Every numeric group is \d+, so int() cannot fail here.
    return int(m.group(1))


def _exact_length(m: Match[str]) -> Filters:
    n = _number(m)
    return {"min_length": n, "max_length": n}


_PALINDROME_ROOT = "palindrom"

# Rules compile with re.ASCII: only 0-9 count as digits.
_CHARACTERS = r"(?:\s+characters?)?\b"

# First match wins.
WORD_COUNT_RULES: Tuple[Rule, ...] = (
    Rule(re.compile(r"\b(?:single|one)\s+word\b", re.ASCII), lambda m: {"word_count": 1}),
    Rule(re.compile(r"\btwo\s+words?\b", re.ASCII), lambda m: {"word_count": 2}),
    Rule(re.compile(r"\bthree\s+words?\b", re.ASCII), lambda m: {"word_count": 3}),
    Rule(re.compile(r"\b(\d+)\s+words?\b", re.ASCII), lambda m: {"word_count": _number(m)}),
)

# All evaluated; a later match overwrites the fields an earlier one set.
LENGTH_RULES: Tuple[Rule, ...] = (
    Rule(
        re.compile(r"\b(?:longer|more)\s+than\s+(\d+)" + _CHARACTERS, re.ASCII),
        lambda m: {"min_length": _number(m) + 1},
    ),
    Rule(
        re.compile(r"\b(?:shorter|less)\s+than\s+(\d+)" + _CHARACTERS, re.ASCII),
        lambda m: {"max_length": _number(m) - 1},
    ),
    Rule(re.compile(r"\bat\s+least\s+(\d+)" + _CHARACTERS, re.ASCII), lambda m: {"min_length": _number(m)}),
    Rule(re.compile(r"\bat\s+most\s+(\d+)" + _CHARACTERS, re.ASCII), lambda m: {"max_length": _number(m)}),
    Rule(re.compile(r"\bexactly\s+(\d+)" + _CHARACTERS, re.ASCII), _exact_length),
)

LETTER_RULE = Rule(
    re.compile(r"\b(?:containing|with|that\s+contain)\s+(?:the\s+)?(?:letter|character)\s+([a-z])\b", re.ASCII),
    lambda m: {"contains_character": m.group(1)},
)

# Only consulted when LETTER_RULE did not match.
BARE_LETTER_RULE = Rule(
    re.compile(r"\bcontaining\s+([a-z])\b", re.ASCII),
    lambda m: {"contains_character": m.group(1)},
)

# Each overwrites, so the last phrase in this order that appears wins.
ORDINAL_VOWELS: Tuple[Tuple[str, str], ...] = (
    ("first vowel", "a"),
    ("second vowel", "e"),
    ("third vowel", "i"),
    ("fourth vowel", "o"),
    ("fifth vowel", "u"),
)

CONFLICT_CHECKS: Tuple[Tuple[Callable[[Filters], bool], str], ...] = (
    (
        lambda f: "min_length" in f and "max_length" in f and f["min_length"] > f["max_length"],
        MIN_GREATER_THAN_MAX,
    ),
)


def normalize_query(query: str) -> str:
    return query.lower().strip()


def _word_count_filters(q: str) -> Filters:
    for rule in WORD_COUNT_RULES:
        found = rule.match(q)
        if found is not None:
            return found
    return {}


def _length_filters(q: str) -> Filters:
    filters: Filters = {}
    for rule in LENGTH_RULES:
        found = rule.match(q)
        if found is not None:
            filters.update(found)
    return filters


def _containment_filters(q: str) -> Filters:
    filters = LETTER_RULE.match(q)
    if filters is None:
        filters = BARE_LETTER_RULE.match(q) or {}
    for phrase, vowel in ORDINAL_VOWELS:
        if phrase in q:
            filters["contains_character"] = vowel
    return filters


def detect_conflicts(filters: Filters) -> List[str]:
    return [message for check, message in CONFLICT_CHECKS if check(filters)]


def parse_query(query: str) -> ParseResult:
    """Translate a free-text query into a filter set.

    Returns ``ParseFailure`` for blank queries and for queries where no rule
    matched. Otherwise returns ``ParseSuccess`` with every extracted filter,
    plus any conflicts between them. Conflicting filters are still returned;
    rejecting them is up to the caller.
    """
    q = normalize_query(query)
    if not q:
        return ParseFailure(EMPTY_QUERY_REASON)

    filters: Filters = {}
    if _PALINDROME_ROOT in q:
        filters["is_palindrome"] = True
    filters.update(_word_count_filters(q))
    filters.update(_length_filters(q))
    filters.update(_containment_filters(q))

    if not filters:
        return ParseFailure(NO_FILTERS_REASON)
    return ParseSuccess(filters=filters, conflicts=detect_conflicts(filters))
