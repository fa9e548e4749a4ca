"""Canonical garment subtypes and the synonyms that map onto them.

Many free-text subtype words ("sneakers", "chelsea", "mom jeans") collapse into
a small canonical vocabulary. Each canonical subtype belongs to exactly one
layer kind, which lets the parser bind a hard subtype requirement to a layer.
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Tuple

from models.taxonomy import LayerKind, normalize_text


class CanonicalSubtype(str, Enum):
    # shoes
    TRAINERS = "trainers"
    HEELS = "heels"
    BOOTS = "boots"
    LOAFERS = "loafers"
    SANDALS = "sandals"
    FLATS = "flats"
    # bottoms
    SKIRT = "skirt"
    JEANS = "jeans"
    TROUSERS = "trousers"
    SHORTS = "shorts"
    LEGGINGS = "leggings"
    # tops
    HOODIE = "hoodie"
    SWEATER = "sweater"
    BLOUSE = "blouse"
    TEE = "tee"
    TANK = "tank"
    # outerwear
    BLAZER = "blazer"
    JACKET = "jacket"
    COAT = "coat"
    TRENCH = "trench"
    PARKA = "parka"
    # bags
    TOTE = "tote"
    CROSSBODY = "crossbody"
    CLUTCH = "clutch"
    SHOULDER = "shoulder"
    # accessories
    BELT = "belt"
    SCARF = "scarf"
    HAT = "hat"
    SUNGLASSES = "sunglasses"
    JEWELRY = "jewelry"


# Synonyms are stored pre-normalised (see ``normalize_text``).
SYNONYMS: Mapping[CanonicalSubtype, FrozenSet[str]] = MappingProxyType(
    {
        CanonicalSubtype.TRAINERS: frozenset(
            {
                "trainer", "trainers", "sneaker", "sneakers", "tennisshoe", "tennisshoes",
                "runningshoe", "runningshoes", "plimsoll", "plimsolls", "kicks",
                "athleticshoe", "gymshoe",
            }
        ),
        CanonicalSubtype.HEELS: frozenset(
            {"heel", "heels", "pump", "pumps", "stiletto", "stilettos", "slingback", "slingbacks"}
        ),
        CanonicalSubtype.BOOTS: frozenset(
            {
                "boot", "boots", "chelsea", "combat", "ankleboot", "ankleboots", "kneeboot",
                "kneeboots", "knee", "kneehigh",
            }
        ),
        CanonicalSubtype.LOAFERS: frozenset(
            {"loafer", "loafers", "pennyloafer", "pennyloafers", "drivingloafer", "drivingloafers"}
        ),
        CanonicalSubtype.SANDALS: frozenset(
            {"sandal", "sandals", "slide", "slides", "flipflop", "flipflops", "mule", "mules"}
        ),
        CanonicalSubtype.FLATS: frozenset({"flat", "flats", "balletflat", "balletflats"}),
        CanonicalSubtype.SKIRT: frozenset(
            {"skirt", "miniskirt", "midiskirt", "maxiskirt", "slipskirt", "pleatedskirt"}
        ),
        CanonicalSubtype.JEANS: frozenset(
            {"jean", "jeans", "denim", "momjeans", "skinnyjeans", "straightjeans", "widejeans"}
        ),
        CanonicalSubtype.TROUSERS: frozenset(
            {"trouser", "trousers", "pants", "slacks", "tailoredpants", "suitpants", "chinos"}
        ),
        CanonicalSubtype.SHORTS: frozenset(
            {"short", "shorts", "denimshorts", "bikershorts", "bermudashorts"}
        ),
        CanonicalSubtype.LEGGINGS: frozenset({"legging", "leggings", "yogapants"}),
        CanonicalSubtype.HOODIE: frozenset({"hoodie", "hooded", "ziphoodie"}),
        CanonicalSubtype.SWEATER: frozenset({"sweater", "jumper", "crewneck", "knit", "cardigan"}),
        CanonicalSubtype.BLOUSE: frozenset({"blouse", "shirt", "buttondown", "buttonup"}),
        # a bare "t" would match every haystack containing the letter
        CanonicalSubtype.TEE: frozenset({"tee", "tshirt", "teeshirt", "graphictee"}),
        CanonicalSubtype.TANK: frozenset({"tank", "camisole", "cami", "singlet"}),
        CanonicalSubtype.BLAZER: frozenset({"blazer"}),
        CanonicalSubtype.JACKET: frozenset({"jacket", "bikerjacket", "denimjacket", "bomber"}),
        CanonicalSubtype.COAT: frozenset({"coat", "overcoat", "woolcoat"}),
        CanonicalSubtype.TRENCH: frozenset({"trench", "trenchcoat"}),
        CanonicalSubtype.PARKA: frozenset({"parka", "puffer", "downjacket"}),
        CanonicalSubtype.TOTE: frozenset({"tote", "totebag", "shopper"}),
        CanonicalSubtype.CROSSBODY: frozenset({"crossbody", "crossbodybag", "messenger"}),
        CanonicalSubtype.CLUTCH: frozenset({"clutch", "eveningbag"}),
        CanonicalSubtype.SHOULDER: frozenset({"shoulderbag", "shoulder"}),
        CanonicalSubtype.BELT: frozenset({"belt", "waistbelt"}),
        CanonicalSubtype.SCARF: frozenset({"scarf", "shawl", "wrap"}),
        CanonicalSubtype.HAT: frozenset({"hat", "beanie", "cap", "bucket"}),
        CanonicalSubtype.SUNGLASSES: frozenset({"sunglass", "sunglasses", "sunnies", "shade", "shades"}),
        CanonicalSubtype.JEWELRY: frozenset(
            {"jewelry", "jewellery", "necklace", "bracelet", "earring", "earrings", "ring", "rings"}
        ),
    }
)

_KIND_OF_SUBTYPE: Mapping[CanonicalSubtype, LayerKind] = MappingProxyType(
    {
        **{
            subtype: LayerKind.SHOES
            for subtype in (
                CanonicalSubtype.TRAINERS,
                CanonicalSubtype.HEELS,
                CanonicalSubtype.BOOTS,
                CanonicalSubtype.LOAFERS,
                CanonicalSubtype.SANDALS,
                CanonicalSubtype.FLATS,
            )
        },
        **{
            subtype: LayerKind.BOTTOM
            for subtype in (
                CanonicalSubtype.SKIRT,
                CanonicalSubtype.JEANS,
                CanonicalSubtype.TROUSERS,
                CanonicalSubtype.SHORTS,
                CanonicalSubtype.LEGGINGS,
            )
        },
        **{
            subtype: LayerKind.TOP
            for subtype in (
                CanonicalSubtype.HOODIE,
                CanonicalSubtype.SWEATER,
                CanonicalSubtype.BLOUSE,
                CanonicalSubtype.TEE,
                CanonicalSubtype.TANK,
            )
        },
        **{
            subtype: LayerKind.OUTERWEAR
            for subtype in (
                CanonicalSubtype.BLAZER,
                CanonicalSubtype.JACKET,
                CanonicalSubtype.COAT,
                CanonicalSubtype.TRENCH,
                CanonicalSubtype.PARKA,
            )
        },
        **{
            subtype: LayerKind.BAG
            for subtype in (
                CanonicalSubtype.TOTE,
                CanonicalSubtype.CROSSBODY,
                CanonicalSubtype.CLUTCH,
                CanonicalSubtype.SHOULDER,
            )
        },
        **{
            subtype: LayerKind.ACCESSORY
            for subtype in (
                CanonicalSubtype.BELT,
                CanonicalSubtype.SCARF,
                CanonicalSubtype.HAT,
                CanonicalSubtype.SUNGLASSES,
                CanonicalSubtype.JEWELRY,
            )
        },
    }
)

_TOKEN_INDEX: Mapping[str, CanonicalSubtype] = MappingProxyType(
    {synonym: subtype for subtype, synonyms in SYNONYMS.items() for synonym in synonyms}
)


def kind_of(subtype: CanonicalSubtype) -> LayerKind:
    return _KIND_OF_SUBTYPE[subtype]


def canonical(token: str) -> Optional[Tuple[LayerKind, CanonicalSubtype]]:
    """Resolve a raw token to its canonical subtype and home layer kind."""

    subtype = _TOKEN_INDEX.get(normalize_text(token))
    if subtype is None:
        return None
    return _KIND_OF_SUBTYPE[subtype], subtype


def matches(
    haystack: str,
    subcategory: str,
    kind: LayerKind,
    required: Iterable[CanonicalSubtype],
) -> bool:
    """Return ``True`` if any synonym of any required subtype occurs in the item text.

    An empty ``required`` collection means there is no constraint. The match is
    a loose substring check so compound descriptions like "black chelsea boot"
    still qualify.
    """

    required = tuple(required)
    if not required:
        return True
    text = f"{normalize_text(haystack)} {normalize_text(subcategory)}"
    for subtype in required:
        if any(synonym in text for synonym in SYNONYMS.get(subtype, ())):
            return True
    return False


def human_label(subtypes: Iterable[CanonicalSubtype]) -> str:
    """Short user facing label: ``"jeans"``, ``"jeans / skirt"`` or ``"a, b, c…"``."""

    names = sorted(CanonicalSubtype(subtype).value for subtype in subtypes)
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return " / ".join(names)
    return ", ".join(names[:3]) + "…"


__all__ = [
    "CanonicalSubtype",
    "SYNONYMS",
    "kind_of",
    "canonical",
    "matches",
    "human_label",
]
