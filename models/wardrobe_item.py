"""Wardrobe item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, List, Optional

from models.color_lexicon import normalize_all


def _ensure_list(value: Any) -> List[Any]:
    """Coerce a scalar or iterable into a list."""

    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _clean_strings(values: Any) -> List[str]:
    cleaned = []
    seen = set()
    for value in _ensure_list(values):
        text = str(value).strip()
        if text and text.lower() not in seen:
            cleaned.append(text)
            seen.add(text.lower())
    return cleaned


def _parse_added_at(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if value:
        parsed = datetime.fromisoformat(str(value))
        return parsed.astimezone(timezone.utc) if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc)


@dataclass
class WardrobeItem:
    """Represents an item in the user's wardrobe.

    ``colors`` keeps the raw labels the user entered; canonical colors are
    derived on demand through :attr:`normalized_colors`.
    """

    item_id: str
    user_id: str
    image_url: str
    category: str
    sub_category: str = ""
    style: str = ""
    design_pattern: str = ""
    material: str = ""
    fit: str = ""
    dress_code: str = ""
    colors: List[str] = field(default_factory=list)
    custom_tags: List[str] = field(default_factory=list)
    mood_tags: List[str] = field(default_factory=list)
    added_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.category = str(self.category or "").strip()
        self.sub_category = str(self.sub_category or "").strip()
        for name in ("style", "design_pattern", "material", "fit", "dress_code"):
            setattr(self, name, str(getattr(self, name) or "").strip())
        self.colors = _clean_strings(self.colors)
        self.custom_tags = _clean_strings(self.custom_tags)
        self.mood_tags = _clean_strings(self.mood_tags)
        self.added_at = _parse_added_at(self.added_at)

    @property
    def normalized_colors(self) -> FrozenSet[str]:
        return normalize_all(self.colors)

    @property
    def classification_text(self) -> str:
        """Lowercased category and subcategory, the input of layer classification."""

        return f"{self.category} {self.sub_category}".lower()

    @property
    def haystack(self) -> str:
        """Every free-text attribute joined for loose keyword matching."""

        parts = [
            self.category,
            self.sub_category,
            self.style,
            self.design_pattern,
            self.material,
            self.fit,
            self.dress_code,
            *self.custom_tags,
            *self.mood_tags,
        ]
        return " ".join(part for part in parts if part).lower()


def from_raw_metadata(metadata: Dict[str, Any]) -> WardrobeItem:
    """Factory to build a :class:`WardrobeItem` from loose metadata."""

    required_fields = ["item_id", "user_id", "image_url", "category"]
    missing = [field for field in required_fields if not metadata.get(field)]
    if missing:
        raise ValueError(f"Missing required fields for WardrobeItem: {missing}")

    return WardrobeItem(
        item_id=str(metadata["item_id"]),
        user_id=str(metadata["user_id"]),
        image_url=str(metadata["image_url"]),
        category=str(metadata["category"]),
        sub_category=str(metadata.get("sub_category") or metadata.get("subcategory") or ""),
        style=metadata.get("style") or "",
        design_pattern=metadata.get("design_pattern") or metadata.get("pattern") or "",
        material=metadata.get("material") or "",
        fit=metadata.get("fit") or "",
        dress_code=metadata.get("dress_code") or "",
        colors=_ensure_list(metadata.get("colors")),
        custom_tags=_ensure_list(metadata.get("custom_tags")),
        mood_tags=_ensure_list(metadata.get("mood_tags")),
        added_at=metadata.get("added_at"),
    )


__all__ = ["WardrobeItem", "from_raw_metadata"]
