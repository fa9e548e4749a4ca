"""Outfit candidate and saved outfit schemas."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from models.subtype_lexicon import CanonicalSubtype, human_label
from models.taxonomy import DISPLAY_ORDER, LayerKind
from models.wardrobe_item import WardrobeItem


class RelaxKind(str, Enum):
    NONE = "none"
    COLOR = "color"
    SUBTYPE = "subtype"
    BOTH = "both"


@dataclass(frozen=True)
class RelaxReason:
    """Why a kind's hard constraints had to be loosened.

    ``subtypes`` is only populated for ``SUBTYPE`` and ``BOTH``.
    """

    kind: RelaxKind = RelaxKind.NONE
    subtypes: FrozenSet[CanonicalSubtype] = frozenset()

    @classmethod
    def none(cls) -> "RelaxReason":
        return cls()

    @classmethod
    def color(cls) -> "RelaxReason":
        return cls(RelaxKind.COLOR)

    @classmethod
    def subtype(cls, subtypes) -> "RelaxReason":
        return cls(RelaxKind.SUBTYPE, frozenset(subtypes))

    @classmethod
    def both(cls, subtypes) -> "RelaxReason":
        return cls(RelaxKind.BOTH, frozenset(subtypes))

    @property
    def relaxed(self) -> bool:
        return self.kind is not RelaxKind.NONE

    def describe(self, layer: LayerKind) -> Optional[str]:
        """Sentence shown to the user, or ``None`` when nothing was relaxed."""

        target = layer.value
        if self.kind is RelaxKind.COLOR:
            return f"Closest match for {target} (relaxed color)."
        if self.kind is RelaxKind.SUBTYPE:
            return f"Closest match for {target} (no {human_label(self.subtypes)} found)."
        if self.kind is RelaxKind.BOTH:
            return f"Closest match for {target} (relaxed color & no {human_label(self.subtypes)} found)."
        return None


def _new_candidate_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, eq=False)
class OutfitCandidate:
    """One composed outfit. Equality is identity, never content."""

    items_by_kind: Mapping[LayerKind, WardrobeItem]
    soft_match_note: Optional[str] = None
    relax_reasons: Mapping[LayerKind, RelaxReason] = field(default_factory=lambda: MappingProxyType({}))
    candidate_id: str = field(default_factory=_new_candidate_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "items_by_kind", MappingProxyType(dict(self.items_by_kind)))
        object.__setattr__(self, "relax_reasons", MappingProxyType(dict(self.relax_reasons)))

    @property
    def ordered_pairs(self) -> List[Tuple[LayerKind, WardrobeItem]]:
        return [(kind, self.items_by_kind[kind]) for kind in DISPLAY_ORDER if kind in self.items_by_kind]

    @property
    def ordered_items(self) -> List[WardrobeItem]:
        return [item for _, item in self.ordered_pairs]

    @property
    def is_complete(self) -> bool:
        """Shoes plus either a dress or a top and bottom pair."""

        kinds = self.items_by_kind
        if LayerKind.SHOES not in kinds:
            return False
        return LayerKind.DRESS in kinds or (LayerKind.TOP in kinds and LayerKind.BOTTOM in kinds)

    def with_items(self, items_by_kind: Mapping[LayerKind, WardrobeItem]) -> "OutfitCandidate":
        """Return a fresh candidate (new id) holding ``items_by_kind``."""

        return OutfitCandidate(
            items_by_kind=items_by_kind,
            soft_match_note=self.soft_match_note,
            relax_reasons=self.relax_reasons,
        )


@dataclass
class OutfitRecord:
    """A saved outfit as persisted by an outfit store."""

    outfit_id: str
    user_id: str
    name: str
    item_ids: List[str]
    image_urls: List[str] = field(default_factory=list)
    description: str = ""
    occasion: str = ""
    cover_image_url: str = ""
    is_favorite: bool = False
    wear_count: int = 0
    source: str = "prompt"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    target_date: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outfit_id": self.outfit_id,
            "user_id": self.user_id,
            "name": self.name,
            "item_ids": list(self.item_ids),
            "image_urls": list(self.image_urls),
            "description": self.description,
            "occasion": self.occasion,
            "cover_image_url": self.cover_image_url,
            "is_favorite": self.is_favorite,
            "wear_count": self.wear_count,
            "source": self.source,
            "created_at": self.created_at.isoformat(),
            "target_date": self.target_date.isoformat() if self.target_date else None,
        }


__all__ = ["RelaxKind", "RelaxReason", "OutfitCandidate", "OutfitRecord"]
