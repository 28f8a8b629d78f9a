from hashlib import sha256
from typing import Any, Dict


def compute_length(value: str) -> int:
    return len(value)


def is_palindrome(value: str) -> bool:
    """Case-insensitive check; spaces and punctuation are significant."""
    lower = value.lower()
    return lower == lower[::-1]


def count_unique_characters(value: str) -> int:
    return len(set(value))


def count_words(value: str) -> int:
    return len(value.split())


def compute_sha256(value: str) -> str:
    """Hex digest of the UTF-8 bytes. Used as the record id."""
    return sha256(value.encode("utf-8")).hexdigest()


def character_frequency_map(value: str) -> Dict[str, int]:
    freq: Dict[str, int] = {}
    for c in value:
        freq[c] = freq.get(c, 0) + 1
    return freq


def analyze_string(value: str) -> Dict[str, Any]:
    """Compute every stored property of a string."""
    return {
        "length": compute_length(value),
        "is_palindrome": is_palindrome(value),
        "unique_characters": count_unique_characters(value),
        "word_count": count_words(value),
        "sha256_hash": compute_sha256(value),
        "character_frequency_map": character_frequency_map(value),
    }
