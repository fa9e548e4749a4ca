"""Canonical taxonomy definitions for outfit layers.

This module centralises the layer kinds an outfit is assembled from, the
keyword tables used to recognise them in free text, and the text normalisation
helpers every lexicon shares so matching stays consistent across the parser,
the classifier and the engine.
"""

from __future__ import annotations

import re
import unicodedata
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

_NON_ALNUM = re.compile(r"[^a-z0-9]")


class LayerKind(str, Enum):
    """Logical garment roles used as slots in a composed outfit."""

    DRESS = "dress"
    TOP = "top"
    BOTTOM = "bottom"
    OUTERWEAR = "outerwear"
    SHOES = "shoes"
    BAG = "bag"
    ACCESSORY = "accessory"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


ALL_KINDS: Tuple[LayerKind, ...] = tuple(LayerKind)

BASE_KINDS: FrozenSet[LayerKind] = frozenset(
    {LayerKind.DRESS, LayerKind.TOP, LayerKind.BOTTOM, LayerKind.SHOES, LayerKind.OUTERWEAR}
)
OPTIONAL_KINDS: Tuple[LayerKind, ...] = (LayerKind.OUTERWEAR, LayerKind.BAG, LayerKind.ACCESSORY)

# Base first, then outerwear, footwear, bag and accessory.
DISPLAY_ORDER: Tuple[LayerKind, ...] = (
    LayerKind.DRESS,
    LayerKind.TOP,
    LayerKind.BOTTOM,
    LayerKind.OUTERWEAR,
    LayerKind.SHOES,
    LayerKind.BAG,
    LayerKind.ACCESSORY,
)

DRESS_WORDS: FrozenSet[str] = frozenset({"dress", "gown", "slip"})

KIND_LEXICON: Mapping[str, LayerKind] = MappingProxyType(
    {
        **{word: LayerKind.DRESS for word in ("dress", "gown", "slip")},
        **{
            word: LayerKind.TOP
            for word in (
                "top", "shirt", "tee", "tshirt", "blouse", "hoodie", "sweater",
                "jumper", "cardigan", "tank", "camisole",
            )
        },
        **{
            word: LayerKind.BOTTOM
            for word in (
                "bottom", "pants", "trouser", "trousers", "jeans", "denim", "skirt",
                "shorts", "leggings",
            )
        },
        **{
            word: LayerKind.SHOES
            for word in (
                "shoes", "shoe", "heels", "heel", "pumps", "sneakers", "sneaker",
                "trainers", "trainer", "boots", "boot", "loafers", "loafer",
                "sandals", "sandal", "mules", "mule",
            )
        },
        **{
            word: LayerKind.OUTERWEAR
            for word in ("outerwear", "jacket", "coat", "blazer", "trench", "parka")
        },
        **{
            word: LayerKind.BAG
            for word in ("bag", "purse", "handbag", "tote", "clutch", "crossbody")
        },
        **{
            word: LayerKind.ACCESSORY
            for word in (
                "accessory", "accessories", "belt", "scarf", "hat", "sunglasses", "jewelry",
            )
        },
    }
)


def normalize_text(value: str) -> str:
    """Fold diacritics, lowercase and drop every non-alphanumeric character.

    ``"Pálé  Brown!"`` becomes ``"palebrown"``.
    """

    decomposed = unicodedata.normalize("NFKD", str(value))
    folded = "".join(char for char in decomposed if not unicodedata.combining(char))
    return _NON_ALNUM.sub("", folded.lower())


def contains_insensitive(haystack: str, needle: str) -> bool:
    """Substring check ignoring case, diacritics and punctuation."""

    if not needle:
        return True
    return normalize_text(needle) in normalize_text(haystack)


def kind_for_token(token: str) -> LayerKind | None:
    """Return the layer kind an explicit layer word refers to, if any."""

    return KIND_LEXICON.get(token) or KIND_LEXICON.get(normalize_text(token))


def parse_layer_kind(value: str) -> LayerKind:
    """Validate a loose layer name and return its :class:`LayerKind`.

    Raises a :class:`ValueError` if the value is not a known layer kind.
    """

    key = str(value).strip().lower()
    try:
        return LayerKind(key)
    except ValueError:
        raise ValueError(
            f"Unsupported layer kind '{value}'. Allowed: {[kind.value for kind in ALL_KINDS]}"
        ) from None


__all__ = [
    "LayerKind",
    "ALL_KINDS",
    "BASE_KINDS",
    "OPTIONAL_KINDS",
    "DISPLAY_ORDER",
    "DRESS_WORDS",
    "KIND_LEXICON",
    "normalize_text",
    "contains_insensitive",
    "kind_for_token",
    "parse_layer_kind",
]
