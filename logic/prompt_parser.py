"""Rule based parsing of free-text styling prompts into :class:`PromptQuery`.

The parser is a pure function. It never raises for unrecognised input; unknown
words are simply ignored and an empty prompt yields an empty query.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from models import color_lexicon, subtype_lexicon
from models.color_lexicon import PaletteKind, PaletteMode
from models.prompt_query import PromptQuery
from models.subtype_lexicon import CanonicalSubtype
from models.taxonomy import DRESS_WORDS, LayerKind, contains_insensitive, kind_for_token

logger = logging.getLogger(__name__)

_TOKEN_SPLIT = re.compile(r"[^a-z0-9\s-]")

STOPWORDS: FrozenSet[str] = frozenset({"and", "with", "in", "for", "to", "a", "an", "the", "please"})

# Checked in order; the first phrase found wins.
DRESS_CODES: Tuple[Tuple[str, str], ...] = (
    ("smart casual", "smart casual"),
    ("business casual", "smart casual"),
    ("smart", "smart"),
    ("formal", "formal"),
    ("casual", "casual"),
)

# Checked in order; the last phrase found wins.
OCCASIONS: Tuple[str, ...] = ("wedding", "interview", "office", "date", "party", "beach", "gym")

COLD_WORDS: FrozenSet[str] = frozenset({"cold", "winter", "chilly", "rain", "rainy", "snow", "snowy", "wet"})
HOT_WORDS: FrozenSet[str] = frozenset({"hot", "summer", "warm"})

NEUTRAL_WORDS: FrozenSet[str] = frozenset({"neutral", "neutrals"})
PASTEL_WORDS: FrozenSet[str] = frozenset({"pastel", "pastels", "soft", "light", "baby", "muted"})
EARTH_WORDS: FrozenSet[str] = frozenset(
    {"earth", "earthy", "terra", "terracotta", "khaki", "olive", "camel", "brown", "beige", "tan"}
)
COLORFUL_WORDS: FrozenSet[str] = frozenset({"colorful", "colourful", "bright", "vibrant"})

STYLE_WORDS: FrozenSet[str] = frozenset(
    {
        "minimal",
        "sporty",
        "edgy",
        "boho",
        "preppy",
        "streetwear",
        "vintage",
        "romantic",
        "chic",
        "classy",
        "elegant",
        "bold",
        "trendy",
    }
)

COLOR_WINDOW = 3

# Coarse vocabularies used for soft subtype scoring.
SOFT_SUBTYPE_FAMILIES: Tuple[Tuple[LayerKind, FrozenSet[str]], ...] = (
    (
        LayerKind.BOTTOM,
        frozenset(
            {"jeans", "denim", "trouser", "trousers", "pants", "slacks", "skirt", "shorts", "leggings"}
        ),
    ),
    (
        LayerKind.TOP,
        frozenset(
            {
                "hoodie", "sweater", "jumper", "cardigan", "crewneck", "blouse", "shirt", "tee",
                "t-shirt", "tank", "camisole", "top",
            }
        ),
    ),
    (
        LayerKind.SHOES,
        frozenset(
            {
                "heel", "heels", "pump", "pumps", "stiletto", "sneaker", "sneakers", "trainer",
                "trainers", "boot", "boots", "chelsea", "combat", "loafer", "loafers", "sandal",
                "sandals", "mule", "mules", "flat", "flats",
            }
        ),
    ),
    (LayerKind.OUTERWEAR, frozenset({"jacket", "blazer", "coat", "trench", "parka"})),
)


def tokenize(text: str) -> List[str]:
    """Lowercase, split on anything but letters, digits and hyphens, drop stopwords.

    A hyphenated token is kept and followed by its parts, so ``all-black`` is
    read the same way as ``all black``. Hyphenated garment names such as
    ``t-shirt`` stay whole.
    """

    tokens: List[str] = []
    for raw in _TOKEN_SPLIT.sub(" ", text.lower()).split():
        if raw in STOPWORDS:
            continue
        tokens.append(raw)
        if "-" in raw and subtype_lexicon.canonical(raw) is None:
            tokens.extend(part for part in raw.split("-") if part and part not in STOPWORDS)
    return tokens


def _has_phrase(lower: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", lower) is not None


def _detect_dress_code(lower: str) -> Optional[str]:
    for phrase, dress_code in DRESS_CODES:
        if _has_phrase(lower, phrase):
            return dress_code
    return None


def _detect_occasion(lower: str) -> Optional[str]:
    occasion = None
    for phrase in OCCASIONS:
        if _has_phrase(lower, phrase):
            occasion = phrase
    return occasion


def _prompt_color(token: str) -> Optional[str]:
    # ends-with matching only for compounds such as wood-brown
    return color_lexicon.normalize(token, allow_suffix="-" in token)


def _detect_palette(lower: str, tokens: List[str]) -> PaletteMode:
    if "all" in tokens:
        index = tokens.index("all")
        if index + 1 < len(tokens):
            color = _prompt_color(tokens[index + 1])
            if color:
                return PaletteMode.monochrome(color, strict=True)
    if contains_insensitive(lower, "monochrome"):
        return PaletteMode.monochrome(None, strict=True)

    words = set(tokens)
    for vocabulary, kind in (
        (NEUTRAL_WORDS, PaletteKind.NEUTRAL),
        (PASTEL_WORDS, PaletteKind.PASTEL),
        (EARTH_WORDS, PaletteKind.EARTH),
        (COLORFUL_WORDS, PaletteKind.COLORFUL),
    ):
        if words & vocabulary:
            return PaletteMode(kind=kind)
    return PaletteMode()


def _detect_metallic(lower: str) -> Optional[str]:
    metallic = None
    if "gold" in lower:
        metallic = "gold"
    if "silver" in lower:
        metallic = "silver"
    return metallic


def parse_prompt(text: str) -> PromptQuery:
    """Parse ``text`` into a :class:`PromptQuery`."""

    lower = str(text or "").lower()
    tokens = tokenize(lower)
    words = set(tokens)

    dress_code = _detect_dress_code(lower)
    occasion = _detect_occasion(lower)
    prefer_outerwear = bool(words & COLD_WORDS)
    avoid_outerwear = bool(words & HOT_WORDS)
    palette = _detect_palette(lower, tokens)
    style_tags = frozenset(words & STYLE_WORDS)
    metallic = _detect_metallic(lower)

    required_subtypes: Dict[LayerKind, Set[CanonicalSubtype]] = {}
    required_kinds: Set[LayerKind] = set()
    wants_dress_base: Optional[bool] = None

    for token in tokens:
        resolved = subtype_lexicon.canonical(token)
        if resolved:
            kind, subtype = resolved
            required_subtypes.setdefault(kind, set()).add(subtype)
            required_kinds.add(kind)
            if kind is LayerKind.BOTTOM:
                wants_dress_base = False
        kind = kind_for_token(token)
        if kind:
            required_kinds.add(kind)

    if wants_dress_base is None and words & DRESS_WORDS:
        wants_dress_base = True

    required_colors: Dict[LayerKind, Set[str]] = {}
    global_colors: Set[str] = set()
    if palette.is_monochrome and palette.color:
        global_colors.add(palette.color)

    for token in tokens:
        base = _prompt_color(token)
        if base:
            global_colors.add(base)

    index = 0
    while index < len(tokens):
        base = _prompt_color(tokens[index])
        index += 1
        if not base:
            continue
        for offset, follower in enumerate(tokens[index : index + COLOR_WINDOW]):
            kind = kind_for_token(follower)
            if kind:
                required_colors.setdefault(kind, set()).update(color_lexicon.expand_family(base))
                required_kinds.add(kind)
                # resume after the bound layer word
                index += offset + 1
                break

    subtype_by_kind: Dict[LayerKind, Set[str]] = {}
    for kind, vocabulary in SOFT_SUBTYPE_FAMILIES:
        if words & vocabulary:
            subtype_by_kind.setdefault(kind, set()).update(vocabulary)

    query = PromptQuery(
        required_colors_by_kind={kind: frozenset(colors) for kind, colors in required_colors.items()},
        required_subtypes_by_kind={kind: frozenset(values) for kind, values in required_subtypes.items()},
        subtype_by_kind={kind: frozenset(values) for kind, values in subtype_by_kind.items()},
        required_kinds=frozenset(required_kinds),
        global_colors=frozenset(global_colors),
        style_tags=style_tags,
        dress_code=dress_code,
        occasion=occasion,
        palette=palette,
        wants_dress_base=wants_dress_base,
        prefer_outerwear=prefer_outerwear,
        avoid_outerwear=avoid_outerwear,
        metallic=metallic,
    )
    logger.debug(
        "Parsed prompt into palette=%s dress_code=%s occasion=%s kinds=%s",
        palette.kind.value,
        dress_code,
        occasion,
        sorted(kind.value for kind in required_kinds),
    )
    return query


__all__ = ["parse_prompt", "tokenize", "STOPWORDS"]
