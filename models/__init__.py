"""Model package exports."""

from models.color_lexicon import PaletteKind, PaletteMode
from models.outfit import OutfitCandidate, OutfitRecord, RelaxKind, RelaxReason
from models.prompt_query import PromptQuery
from models.subtype_lexicon import CanonicalSubtype
from models.taxonomy import LayerKind
from models.wardrobe_item import WardrobeItem, from_raw_metadata

__all__ = [
    "CanonicalSubtype",
    "LayerKind",
    "OutfitCandidate",
    "OutfitRecord",
    "PaletteKind",
    "PaletteMode",
    "PromptQuery",
    "RelaxKind",
    "RelaxReason",
    "WardrobeItem",
    "from_raw_metadata",
]
