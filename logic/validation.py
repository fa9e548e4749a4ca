"""Pydantic schemas and helpers for validating stylist requests and responses."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from models.outfit import OutfitCandidate
from models.taxonomy import LayerKind, parse_layer_kind


class PromptRequest(BaseModel):
    """Start a deck of candidates for a prompt."""

    user_id: str = Field(min_length=1)
    prompt: str = Field(default="", max_length=500)
    count: Optional[int] = Field(default=None, ge=1, le=10)

    @field_validator("prompt")
    @classmethod
    def _strip_prompt(cls, prompt: str) -> str:
        return prompt.strip()


class SkipRequest(BaseModel):
    candidate_id: str = Field(min_length=1)


class LockRequest(BaseModel):
    """Pin an item to one layer of every following candidate."""

    kind: LayerKind
    item_id: str = Field(min_length=1)

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> LayerKind:
        return value if isinstance(value, LayerKind) else parse_layer_kind(str(value))


class UnlockRequest(BaseModel):
    kind: LayerKind

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> LayerKind:
        return value if isinstance(value, LayerKind) else parse_layer_kind(str(value))


class SaveOutfitRequest(BaseModel):
    """Metadata attached to a saved candidate; blanks fall back to prompt values."""

    candidate_id: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, max_length=120)
    description: str = Field(default="", max_length=1000)
    occasion: Optional[str] = Field(default=None, max_length=60)
    target_date: Optional[date] = None
    is_favorite: bool = False


class CandidateItemView(BaseModel):
    kind: LayerKind
    item_id: str
    image_url: str
    category: str
    sub_category: str = ""
    colors: List[str] = []


class CandidateView(BaseModel):
    """Serializable view of an :class:`OutfitCandidate`."""

    candidate_id: str
    items: List[CandidateItemView]
    soft_match_note: Optional[str] = None
    relax_reasons: Dict[str, str] = {}
    is_complete: bool

    @classmethod
    def from_candidate(cls, candidate: OutfitCandidate) -> "CandidateView":
        return cls(
            candidate_id=candidate.candidate_id,
            items=[
                CandidateItemView(
                    kind=kind,
                    item_id=item.item_id,
                    image_url=item.image_url,
                    category=item.category,
                    sub_category=item.sub_category,
                    colors=list(item.colors),
                )
                for kind, item in candidate.ordered_pairs
            ],
            soft_match_note=candidate.soft_match_note,
            relax_reasons={kind.value: reason.kind.value for kind, reason in candidate.relax_reasons.items()},
            is_complete=candidate.is_complete,
        )


class DeckResponse(BaseModel):
    """Shape returned by every deck operation."""

    status: Literal["ok", "empty", "error"]
    session_id: Optional[str] = None
    message: Optional[str] = None
    query: Optional[Dict[str, Any]] = None
    candidates: List[CandidateView] = []
    locked: Dict[str, str] = {}


class SaveResult(BaseModel):
    status: Literal["ok", "error"]
    outfit_id: Optional[str] = None
    message: Optional[str] = None


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    details = [
        {key: value for key, value in error.items() if key in {"type", "loc", "msg"}}
        for error in exc.errors()
    ]
    return ValidationResult(message=message, details=details).model_dump()


__all__ = [
    "PromptRequest",
    "SkipRequest",
    "LockRequest",
    "UnlockRequest",
    "SaveOutfitRequest",
    "CandidateItemView",
    "CandidateView",
    "DeckResponse",
    "SaveResult",
    "ValidationResult",
    "validation_failure",
]
