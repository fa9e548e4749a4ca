"""Structured form of a free-text styling prompt."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional

from models.color_lexicon import PaletteKind, PaletteMode
from models.subtype_lexicon import CanonicalSubtype
from models.taxonomy import LayerKind


def _empty_mapping() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True)
class PromptQuery:
    """Parsed intent of one prompt.

    ``required_*`` fields are hard constraints applied before scoring, the
    remaining fields only influence ranking or the structural choice of base.
    """

    required_colors_by_kind: Mapping[LayerKind, FrozenSet[str]] = field(default_factory=_empty_mapping)
    required_subtypes_by_kind: Mapping[LayerKind, FrozenSet[CanonicalSubtype]] = field(
        default_factory=_empty_mapping
    )
    subtype_by_kind: Mapping[LayerKind, FrozenSet[str]] = field(default_factory=_empty_mapping)
    required_kinds: FrozenSet[LayerKind] = frozenset()
    global_colors: FrozenSet[str] = frozenset()
    style_tags: FrozenSet[str] = frozenset()
    dress_code: Optional[str] = None
    occasion: Optional[str] = None
    palette: PaletteMode = PaletteMode()
    wants_dress_base: Optional[bool] = None
    prefer_outerwear: bool = False
    avoid_outerwear: bool = False
    metallic: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("required_colors_by_kind", "required_subtypes_by_kind", "subtype_by_kind"):
            frozen = {kind: frozenset(values) for kind, values in getattr(self, name).items()}
            object.__setattr__(self, name, MappingProxyType(frozen))
        for name in ("required_kinds", "global_colors", "style_tags"):
            object.__setattr__(self, name, frozenset(getattr(self, name)))

    @property
    def is_empty(self) -> bool:
        return self == PromptQuery()

    def to_dict(self) -> Dict[str, Any]:
        """JSON friendly view used by the API and the CLI."""

        return {
            "required_colors_by_kind": {
                kind.value: sorted(colors) for kind, colors in self.required_colors_by_kind.items()
            },
            "required_subtypes_by_kind": {
                kind.value: sorted(subtype.value for subtype in subtypes)
                for kind, subtypes in self.required_subtypes_by_kind.items()
            },
            "subtype_by_kind": {
                kind.value: sorted(words) for kind, words in self.subtype_by_kind.items()
            },
            "required_kinds": sorted(kind.value for kind in self.required_kinds),
            "global_colors": sorted(self.global_colors),
            "style_tags": sorted(self.style_tags),
            "dress_code": self.dress_code,
            "occasion": self.occasion,
            "palette": {
                "kind": self.palette.kind.value,
                "color": self.palette.color,
                "strict": self.palette.strict,
            },
            "wants_dress_base": self.wants_dress_base,
            "prefer_outerwear": self.prefer_outerwear,
            "avoid_outerwear": self.avoid_outerwear,
            "metallic": self.metallic,
        }


__all__ = ["PromptQuery", "PaletteMode", "PaletteKind"]
