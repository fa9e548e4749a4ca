"""Color vocabulary and normalisation helpers for prompt and item matching.

Arbitrary color words coming from prompts or item metadata are folded into a
small set of base colors ("charcoal" -> "grey"), and a base can be expanded
into its family of near-synonyms ("beige" -> camel, taupe, sand, ...). Hard
filters use the exact base while soft scoring uses the broadened family.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Tuple

from models.taxonomy import normalize_text

logger = logging.getLogger(__name__)

BASE_COLORS: FrozenSet[str] = frozenset(
    {
        "black",
        "white",
        "red",
        "blue",
        "green",
        "yellow",
        "pink",
        "beige",
        "brown",
        "grey",
        "purple",
        "orange",
    }
)

NEUTRALS: FrozenSet[str] = frozenset(
    {"black", "white", "grey", "beige", "brown", "camel", "taupe", "tan", "ivory"}
)

EARTH_TONES: FrozenSet[str] = frozenset({"brown", "beige", "green"})

_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        # greys and blacks
        "gray": "grey",
        "charcoal": "grey",
        "graphite": "grey",
        "slate": "grey",
        "ash": "grey",
        "smoke": "grey",
        "smoky": "grey",
        "jet": "black",
        "ebony": "black",
        "noir": "black",
        "ink": "black",
        "obsidian": "black",
        # blues and greens
        "navy": "blue",
        "cobalt": "blue",
        "azul": "blue",
        "skyblue": "blue",
        "teal": "blue",
        "forestgreen": "green",
        "olive": "green",
        "sage": "green",
        "mint": "green",
        # browns and beiges
        "cream": "beige",
        "nude": "beige",
        "taupe": "beige",
        "tan": "beige",
        "camel": "beige",
        "sand": "beige",
        "khaki": "beige",
        "stone": "beige",
        "oat": "beige",
        "oatmeal": "beige",
        "chocolate": "brown",
        "mocha": "brown",
        "coffee": "brown",
        "cognac": "brown",
        "chestnut": "brown",
        # others
        "lilac": "purple",
        "lavender": "purple",
        "coral": "orange",
        "peach": "orange",
        "blush": "pink",
        "rose": "pink",
        "offwhite": "white",
        "ivory": "white",
    }
)

_PREFIX_MODIFIERS: Tuple[str, ...] = (
    "light",
    "dark",
    "bright",
    "deep",
    "neon",
    "soft",
    "muted",
    "pale",
    "baby",
    "pastel",
    "warm",
    "cool",
    "rich",
)

_FAMILIES: Mapping[str, FrozenSet[str]] = MappingProxyType(
    {
        "black": frozenset({"black", "jet", "ebony", "noir", "ink"}),
        "grey": frozenset({"grey", "gray", "charcoal", "graphite", "slate", "ash"}),
        "brown": frozenset({"brown", "mocha", "chocolate", "coffee", "cognac", "chestnut"}),
        "beige": frozenset(
            {"beige", "camel", "taupe", "tan", "sand", "khaki", "stone", "oat", "oatmeal", "cream", "nude"}
        ),
        "green": frozenset({"green", "olive", "sage", "mint", "forestgreen"}),
        "blue": frozenset({"blue", "navy", "cobalt", "skyblue", "teal", "azul"}),
        "pink": frozenset({"pink", "blush", "rose"}),
        "purple": frozenset({"purple", "lilac", "lavender"}),
        "orange": frozenset({"orange", "coral", "peach"}),
        "white": frozenset({"white", "ivory", "offwhite"}),
    }
)


class PaletteKind(str, Enum):
    NONE = "none"
    MONOCHROME = "monochrome"
    NEUTRAL = "neutral"
    PASTEL = "pastel"
    EARTH = "earth"
    COLORFUL = "colorful"


@dataclass(frozen=True)
class PaletteMode:
    """Palette requested by a prompt.

    For monochrome palettes ``color`` may be ``None``, meaning the hue is
    inferred once the outfit base is known. ``strict`` turns the hue into a
    hard filter.
    """

    kind: PaletteKind = PaletteKind.NONE
    color: Optional[str] = None
    strict: bool = False

    @classmethod
    def monochrome(cls, color: Optional[str] = None, strict: bool = True) -> "PaletteMode":
        return cls(kind=PaletteKind.MONOCHROME, color=color, strict=strict)

    @property
    def is_monochrome(self) -> bool:
        return self.kind is PaletteKind.MONOCHROME

    @property
    def is_strict_monochrome(self) -> bool:
        return self.is_monochrome and self.strict


def normalize(raw: str, allow_suffix: bool = True) -> Optional[str]:
    """Map an arbitrary color label to a base color, or ``None`` if unknown.

    With ``allow_suffix`` off, a word that merely ends in a base color
    ("tailored") is not read as that color.
    """

    token = normalize_text(raw)
    for modifier in _PREFIX_MODIFIERS:
        if token.startswith(modifier):
            token = token[len(modifier):]
            break

    # bluish -> blu, which the suffix rule below does not rescue
    if token.endswith("ish"):
        token = token[:-3]

    if not token:
        return None
    if token in _ALIASES:
        return _ALIASES[token]
    if token in BASE_COLORS:
        return token
    if not allow_suffix:
        return None
    for base in sorted(BASE_COLORS):
        if token.endswith(base):
            return base
    return None


def expand_family(base: str) -> FrozenSet[str]:
    """Return the curated family of ``base`` including the base itself."""

    return _FAMILIES.get(base, frozenset()) | {base}


def normalize_all(colors: Iterable[str]) -> FrozenSet[str]:
    """Normalise a collection of raw color names, dropping unrecognised ones."""

    normalized = {normalize(color) for color in colors if color}
    normalized.discard(None)
    return frozenset(normalized)  # type: ignore[arg-type]


def expand_all(bases: Iterable[str]) -> FrozenSet[str]:
    """Union of the families of every base in ``bases``."""

    expanded: set[str] = set()
    for base in bases:
        expanded |= expand_family(base)
    return frozenset(expanded)


__all__ = [
    "BASE_COLORS",
    "NEUTRALS",
    "EARTH_TONES",
    "PaletteKind",
    "PaletteMode",
    "normalize",
    "expand_family",
    "normalize_all",
    "expand_all",
]
