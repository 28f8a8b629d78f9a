from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from .config import get_settings
from .db import StringStore
from .schemas import (
    FilterResponse,
    NaturalLanguageFilterResponse,
    StringRecord,
    StringRequest,
)
from .services import (
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

router = APIRouter()


def get_store(request: Request) -> StringStore:
    return request.app.state.store


@router.get("/")
def root() -> dict:
    settings = get_settings()
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": {
            "POST /strings": "Create and analyze a new string",
            "GET /strings/{string_value}": "Get a specific string by its value",
            "GET /strings": "Get all strings with optional filtering",
            "GET /strings/filter-by-natural-language": "Filter strings using natural language",
            "DELETE /strings/{string_value}": "Delete a specific string",
        },
    }


@router.get("/health")
def health() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok"}


@router.post("/strings", response_model=StringRecord, status_code=201)
def create_string_endpoint(payload: StringRequest, store: StringStore = Depends(get_store)) -> StringRecord:
    """Create and analyze a string."""
    try:
        return create_string(payload.value, store)
    except StringAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))


# Declared before /strings/{string_value} so the literal path is matched first.
@router.get("/strings/filter-by-natural-language", response_model=NaturalLanguageFilterResponse)
def filter_by_natural_language(
    query: str = Query(...),
    store: StringStore = Depends(get_store),
) -> dict:
    """Filter strings using a natural language query."""
    try:
        return get_strings_by_natural_language(store, query)
    except ConflictingFiltersError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "conflicts": e.conflicts})
    except QueryParseError as e:
        raise HTTPException(
            status_code=400,
            detail={"message": "Unable to parse natural language query", "details": str(e)},
        )


@router.get("/strings/{string_value}", response_model=StringRecord)
def get_string_endpoint(string_value: str, store: StringStore = Depends(get_store)) -> StringRecord:
    """Get a specific string by its raw value."""
    try:
        return get_string_by_value(string_value, store)
    except StringNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/strings", response_model=FilterResponse)
def get_all_strings(
    is_palindrome: Optional[str] = Query(None),
    min_length: Optional[str] = Query(None),
    max_length: Optional[str] = Query(None),
    word_count: Optional[str] = Query(None),
    contains_character: Optional[str] = Query(None),
    store: StringStore = Depends(get_store),
) -> dict:
    """Get all strings with optional filtering."""
    try:
        filters = validate_query_filters(is_palindrome, min_length, max_length, word_count, contains_character)
    except InvalidFilterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return get_all_strings_with_filters(store, filters)


@router.delete("/strings/{string_value}", status_code=204)
def delete_string_endpoint(string_value: str, store: StringStore = Depends(get_store)) -> Response:
    """Delete a string by its raw value."""
    try:
        delete_string_by_value(string_value, store)
    except StringNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)
