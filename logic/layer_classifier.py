"""Keyword based assignment of wardrobe items to outfit layers.

The base kinds are mutually exclusive: an item only counts as shoes when it
matches the shoe family and none of the dress, top or bottom families. Bags
and accessories are not checked against other families.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Set, Tuple

from models.taxonomy import ALL_KINDS, LayerKind
from models.wardrobe_item import WardrobeItem

KEYWORD_FAMILIES: Mapping[LayerKind, Tuple[str, ...]] = MappingProxyType(
    {
        LayerKind.DRESS: ("dress", "gown", "jumpsuit", "overall"),
        LayerKind.TOP: (
            "top", "shirt", "blouse", "t-shirt", "tee", "sweater", "hoodie", "cardigan", "tank",
        ),
        LayerKind.BOTTOM: (
            "bottom", "pants", "jeans", "skirt", "shorts", "trouser", "leggings", "trackpants",
        ),
        LayerKind.SHOES: (
            "shoe", "sneaker", "trainer", "boot", "sandal", "loafer", "footwear", "heel",
        ),
        LayerKind.OUTERWEAR: ("jacket", "coat", "blazer", "outerwear", "parka"),
        LayerKind.BAG: ("bag", "handbag", "backpack", "tote", "crossbody", "purse", "wallet"),
        LayerKind.ACCESSORY: (
            "accessory", "accessories", "belt", "scarf", "hat", "cap", "jewellery", "jewelry", "glove",
        ),
    }
)

# Families that must be absent for a base kind to match.
EXCLUSIONS: Mapping[LayerKind, FrozenSet[LayerKind]] = MappingProxyType(
    {
        LayerKind.SHOES: frozenset({LayerKind.DRESS, LayerKind.TOP, LayerKind.BOTTOM}),
        LayerKind.DRESS: frozenset({LayerKind.SHOES, LayerKind.TOP, LayerKind.BOTTOM}),
        LayerKind.TOP: frozenset({LayerKind.DRESS, LayerKind.SHOES, LayerKind.BOTTOM}),
        LayerKind.BOTTOM: frozenset({LayerKind.DRESS, LayerKind.SHOES}),
        LayerKind.OUTERWEAR: frozenset({LayerKind.DRESS, LayerKind.SHOES}),
        LayerKind.BAG: frozenset(),
        LayerKind.ACCESSORY: frozenset(),
    }
)


def _family_hit(text: str, kind: LayerKind) -> bool:
    return any(keyword in text for keyword in KEYWORD_FAMILIES[kind])


def matches_text(text: str, kind: LayerKind) -> bool:
    text = text.lower()
    if not _family_hit(text, kind):
        return False
    return not any(_family_hit(text, other) for other in EXCLUSIONS[kind])


def matches(item: WardrobeItem, kind: LayerKind) -> bool:
    """Return ``True`` if ``item`` belongs to the ``kind`` layer."""

    return matches_text(item.classification_text, kind)


def classify(item: WardrobeItem) -> Set[LayerKind]:
    return {kind for kind in ALL_KINDS if matches(item, kind)}


def bucket_items(items: Iterable[WardrobeItem]) -> Dict[LayerKind, List[WardrobeItem]]:
    """Group items per layer kind, preserving input order inside each bucket."""

    buckets: Dict[LayerKind, List[WardrobeItem]] = {kind: [] for kind in ALL_KINDS}
    for item in items:
        for kind in ALL_KINDS:
            if matches(item, kind):
                buckets[kind].append(item)
    return buckets


__all__ = [
    "KEYWORD_FAMILIES",
    "EXCLUSIONS",
    "matches",
    "matches_text",
    "classify",
    "bucket_items",
]
