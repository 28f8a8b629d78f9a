from pydantic import BaseModel
from datetime import datetime
from typing import Dict, Any, List


class StringRequest(BaseModel):
    """Request schema for creating/analyzing a string."""
    value: str


class StringProperties(BaseModel):
    """Computed properties of an analyzed string."""
    length: int
    is_palindrome: bool
    unique_characters: int
    word_count: int
    sha256_hash: str
    character_frequency_map: Dict[str, int]

    model_config = {"frozen": True}


class StringRecord(BaseModel):
    """A stored string. Immutable once created."""
    id: str
    value: str
    properties: StringProperties
    created_at: datetime

    model_config = {"frozen": True}


class FilterResponse(BaseModel):
    """Response schema for GET /strings."""
    data: List[StringRecord]
    count: int
    filters_applied: Dict[str, Any]


class InterpretedQuery(BaseModel):
    original: str
    parsed_filters: Dict[str, Any]


class NaturalLanguageFilterResponse(BaseModel):
    """Response schema for natural language filtering."""
    data: List[StringRecord]
    count: int
    interpreted_query: InterpretedQuery
