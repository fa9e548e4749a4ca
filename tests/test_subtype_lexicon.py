"""Canonical subtype lookup and matching tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from models import subtype_lexicon
from models.subtype_lexicon import SYNONYMS, CanonicalSubtype
from models.taxonomy import LayerKind


@pytest.mark.parametrize(
    "token, kind, subtype",
    [
        ("Sneakers", LayerKind.SHOES, CanonicalSubtype.TRAINERS),
        ("chelsea", LayerKind.SHOES, CanonicalSubtype.BOOTS),
        ("T-Shirt", LayerKind.TOP, CanonicalSubtype.TEE),
        ("denim", LayerKind.BOTTOM, CanonicalSubtype.JEANS),
        ("trench-coat", LayerKind.OUTERWEAR, CanonicalSubtype.TRENCH),
        ("clutch", LayerKind.BAG, CanonicalSubtype.CLUTCH),
        ("earrings", LayerKind.ACCESSORY, CanonicalSubtype.JEWELRY),
    ],
)
def test_canonical_resolves_synonyms(token: str, kind: LayerKind, subtype: CanonicalSubtype) -> None:
    assert subtype_lexicon.canonical(token) == (kind, subtype)


@pytest.mark.parametrize("token", ["", "t", "dress", "fabulous"])
def test_canonical_ignores_unknown_tokens(token: str) -> None:
    assert subtype_lexicon.canonical(token) is None


def test_every_subtype_has_a_home_kind_and_synonyms() -> None:
    for subtype in CanonicalSubtype:
        assert isinstance(subtype_lexicon.kind_of(subtype), LayerKind)
        assert SYNONYMS[subtype]


def test_matches_with_no_requirement_is_true() -> None:
    assert subtype_lexicon.matches("anything at all", "", LayerKind.SHOES, [])


def test_matches_checks_haystack_and_subcategory() -> None:
    boots = {CanonicalSubtype.BOOTS}
    assert subtype_lexicon.matches("shoes leather", "Chelsea Boot", LayerKind.SHOES, boots)
    assert subtype_lexicon.matches("black chelsea boot", "", LayerKind.SHOES, boots)
    assert not subtype_lexicon.matches("shoes leather", "Loafers", LayerKind.SHOES, boots)
    assert subtype_lexicon.matches(
        "shoes", "Loafers", LayerKind.SHOES, {CanonicalSubtype.BOOTS, CanonicalSubtype.LOAFERS}
    )


def test_tee_does_not_match_every_item_with_a_letter_t() -> None:
    assert not subtype_lexicon.matches("tops", "Tank", LayerKind.TOP, {CanonicalSubtype.TEE})


def test_human_label_formats() -> None:
    assert subtype_lexicon.human_label([]) == ""
    assert subtype_lexicon.human_label([CanonicalSubtype.JEANS]) == "jeans"
    assert subtype_lexicon.human_label([CanonicalSubtype.SKIRT, CanonicalSubtype.JEANS]) == "jeans / skirt"
    label = subtype_lexicon.human_label(
        [CanonicalSubtype.BOOTS, CanonicalSubtype.HEELS, CanonicalSubtype.FLATS, CanonicalSubtype.LOAFERS]
    )
    assert label == "boots, flats, heels…"
