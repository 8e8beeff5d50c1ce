"""Validates parsed model output and builds typed results."""

from typing import Any

from legaldocs.ai.exceptions import AIResponseValidationError
from legaldocs.ai.models import DocumentAnalysis, EntitySet

_MAX_LIST_ITEMS = 100
_ENTITY_CATEGORIES = ("people", "organizations", "dates", "amounts", "locations")


def build_analysis(data: dict[str, Any]) -> DocumentAnalysis:
    """Validate an analysis payload.

    Raises:
        AIResponseValidationError: on any validation failure.
    """
    _require_fields(
        data,
        (
            "document_type",
            "summary",
            "key_entities",
            "legal_implications",
            "recommended_actions",
            "confidence",
        ),
    )
    return DocumentAnalysis(
        document_type=_build_text(data["document_type"], "document_type"),
        summary=_build_text(data["summary"], "summary"),
        key_entities=_build_string_list(data["key_entities"], "key_entities"),
        legal_implications=_build_string_list(data["legal_implications"], "legal_implications"),
        recommended_actions=_build_string_list(
            data["recommended_actions"], "recommended_actions"
        ),
        confidence=_build_confidence(data["confidence"]),
    )


def build_entities(data: dict[str, Any]) -> EntitySet:
    """Validate an entity extraction payload. Missing categories count as empty."""
    unknown = set(data) - set(_ENTITY_CATEGORIES)
    if unknown:
        raise AIResponseValidationError(f"Unexpected entity categories: {sorted(unknown)}")
    return EntitySet(
        **{
            category: _build_string_list(data.get(category, []), category)
            for category in _ENTITY_CATEGORIES
        }
    )


def _require_fields(data: dict[str, Any], fields: tuple[str, ...]) -> None:
    for field in fields:
        if field not in data:
            raise AIResponseValidationError(f"Missing required field: {field}")


def _build_text(raw: Any, field: str) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise AIResponseValidationError(f"'{field}' must be a non-empty string")
    return raw.strip()


def _build_string_list(raw: Any, field: str) -> list[str]:
    if not isinstance(raw, list):
        raise AIResponseValidationError(f"'{field}' must be a list")
    if len(raw) > _MAX_LIST_ITEMS:
        raise AIResponseValidationError(
            f"Too many items in '{field}': {len(raw)} (max {_MAX_LIST_ITEMS})"
        )
    items: list[str] = []
    for index, item in enumerate(raw):
        if not isinstance(item, str):
            raise AIResponseValidationError(f"'{field}[{index}]' must be a string")
        cleaned = item.strip()
        if cleaned and cleaned not in items:
            items.append(cleaned)
    return items


def _build_confidence(raw: Any) -> float:
    # bool is an int subclass
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise AIResponseValidationError("'confidence' must be a number")
    if not 0.0 <= raw <= 1.0:
        raise AIResponseValidationError(f"'confidence' must be within [0, 1], got {raw}")
    return float(raw)
