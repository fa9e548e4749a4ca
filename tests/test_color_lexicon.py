"""Color normalisation and family expansion tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from models import color_lexicon
from models.color_lexicon import BASE_COLORS, NEUTRALS, PaletteKind, PaletteMode


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Charcoal", "grey"),
        ("gray", "grey"),
        ("Navy", "blue"),
        ("light blue", "blue"),
        ("Dark-Green", "green"),
        ("greenish", "green"),
        ("Cream", "beige"),
        ("Tán", "beige"),
        ("wood-brown", "brown"),
        ("jet black", "black"),
        ("off white", "white"),
        ("lavender", "purple"),
    ],
)
def test_normalize_maps_variants_to_bases(raw: str, expected: str) -> None:
    assert color_lexicon.normalize(raw) == expected


def test_suffix_rule_can_be_switched_off() -> None:
    assert color_lexicon.normalize("tailored") == "red"
    assert color_lexicon.normalize("tailored", allow_suffix=False) is None
    assert color_lexicon.normalize("Charcoal", allow_suffix=False) == "grey"


@pytest.mark.parametrize("raw", ["", "   ", "sparkly", "light", "gold", "!!!"])
def test_normalize_returns_none_for_unknown_words(raw: str) -> None:
    assert color_lexicon.normalize(raw) is None


def test_normalize_is_idempotent_on_bases() -> None:
    for base in BASE_COLORS:
        assert color_lexicon.normalize(base) == base
        assert color_lexicon.normalize(color_lexicon.normalize(base)) == base


def test_expand_family_contains_base() -> None:
    for base in BASE_COLORS:
        assert base in color_lexicon.expand_family(base)


def test_expand_family_curated_and_singleton() -> None:
    grey = color_lexicon.expand_family("grey")
    assert {"slate", "ash", "graphite"} <= grey
    assert color_lexicon.expand_family("red") == frozenset({"red"})
    assert color_lexicon.expand_family("yellow") == frozenset({"yellow"})


def test_normalize_all_drops_unknown_and_dedupes() -> None:
    assert color_lexicon.normalize_all(["Navy", "cobalt", "sparkly", ""]) == frozenset({"blue"})


def test_neutrals_cover_core_neutral_bases() -> None:
    assert {"black", "white", "grey", "beige", "brown"} <= NEUTRALS


def test_palette_mode_helpers() -> None:
    mono = PaletteMode.monochrome("black")
    assert mono.is_monochrome and mono.is_strict_monochrome
    assert mono.color == "black"
    assert not PaletteMode(kind=PaletteKind.NEUTRAL).is_monochrome
    assert not PaletteMode.monochrome(strict=False).is_strict_monochrome
