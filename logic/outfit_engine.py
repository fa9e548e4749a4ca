"""Prompt driven outfit assembly.

One call to :meth:`OutfitEngine.generate_candidate` fetches every layer
concurrently, applies hard color and subtype filters (relaxing them when
nothing survives), scores the surviving items against the prompt and picks at
random from the top scoring band of each layer. Shoes and a base (a dress, or a
top and bottom) are mandatory; outerwear, bag and accessory are optional.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Protocol, Sequence, Tuple

from models import color_lexicon, subtype_lexicon
from models.color_lexicon import EARTH_TONES, NEUTRALS, PaletteKind
from models.outfit import OutfitCandidate, RelaxReason
from models.prompt_query import PromptQuery
from models.taxonomy import ALL_KINDS, DISPLAY_ORDER, LayerKind, contains_insensitive
from models.wardrobe_item import WardrobeItem

logger = logging.getLogger(__name__)

DEFAULT_FETCH_LIMIT = 600
DEFAULT_BAND_MARGIN = 10
DEFAULT_MAX_ITEMS = 5

OUTERWEAR_PREFERRED_PROBABILITY = 0.85
OUTERWEAR_AVOIDED_PROBABILITY = 0.1
OUTERWEAR_DEFAULT_PROBABILITY = 0.5
OPTIONAL_PROBABILITY = 0.5

# Dropped first when a candidate exceeds the item cap.
CAP_DROP_ORDER: Tuple[LayerKind, ...] = (LayerKind.ACCESSORY, LayerKind.BAG, LayerKind.OUTERWEAR)

SCORE_DRESS_CODE = 25
SCORE_OCCASION = 15
SCORE_BOUND_COLOR = 60
SCORE_SOFT_COLOR = 25
SCORE_COHERENCE_MATCH = 35
SCORE_COHERENCE_MISS = -10
SCORE_NEUTRAL = 20
SCORE_PASTEL = 15
SCORE_EARTH = 15
SCORE_SOFT_SUBTYPE = 35
SCORE_STYLE_TAG = 18
SCORE_METALLIC = 25
SCORE_OUTERWEAR_PREFERRED = 30
SCORE_OUTERWEAR_AVOIDED = -40


class ItemRepository(Protocol):
    """Read side of a wardrobe store; ``fetch_items`` may be sync or async."""

    def fetch_items(self, user_id: str, kind: LayerKind, limit: int) -> List[WardrobeItem]:
        ...


@dataclass(frozen=True)
class PrefilterResult:
    strict: List[WardrobeItem]
    relaxed: List[WardrobeItem]
    reason: RelaxReason

    @property
    def pool(self) -> List[WardrobeItem]:
        return self.strict if self.strict else self.relaxed


@dataclass
class _GenerationContext:
    """Mutable state shared by the per-kind helpers during one generation."""

    query: PromptQuery
    pools: Mapping[LayerKind, List[WardrobeItem]]
    locked: Mapping[LayerKind, WardrobeItem]
    coherence: Optional[str] = None
    picked: Dict[LayerKind, WardrobeItem] = field(default_factory=dict)
    reasons: Dict[LayerKind, RelaxReason] = field(default_factory=dict)


def hard_color_set(query: PromptQuery, kind: LayerKind, coherence: Optional[str]) -> Optional[FrozenSet[str]]:
    """Colors an item of ``kind`` must carry, or ``None`` when unconstrained."""

    required = query.required_colors_by_kind.get(kind)
    if required:
        return frozenset(required)
    if query.palette.is_strict_monochrome:
        chosen = query.palette.color or coherence
        if chosen:
            return frozenset({chosen})
    return None


def prefilter(
    items: Sequence[WardrobeItem],
    kind: LayerKind,
    query: PromptQuery,
    coherence: Optional[str] = None,
) -> PrefilterResult:
    """Split ``items`` into a strict pool and, if that is empty, a relaxed one.

    Items failing a hard color requirement only reach the relaxed pool when no
    item of the kind carries the color at all.
    """

    hard_colors = hard_color_set(query, kind, coherence)
    hard_subtypes = query.required_subtypes_by_kind.get(kind, frozenset())

    color_ok: List[WardrobeItem] = []
    subtype_ok: List[WardrobeItem] = []
    strict: List[WardrobeItem] = []
    for item in items:
        has_color = hard_colors is None or bool(item.normalized_colors & hard_colors)
        has_subtype = subtype_lexicon.matches(item.haystack, item.sub_category, kind, hard_subtypes)
        if has_color:
            color_ok.append(item)
        if has_subtype:
            subtype_ok.append(item)
        if has_color and has_subtype:
            strict.append(item)

    if strict or not items:
        return PrefilterResult(strict=strict, relaxed=[], reason=RelaxReason.none())

    if hard_colors is not None and color_ok:
        base, reason = color_ok, RelaxReason.subtype(hard_subtypes)
    elif hard_colors is not None:
        if subtype_ok:
            base, reason = subtype_ok, RelaxReason.color()
        elif hard_subtypes:
            base, reason = list(items), RelaxReason.both(hard_subtypes)
        else:
            base, reason = list(items), RelaxReason.color()
    else:
        base, reason = list(items), RelaxReason.subtype(hard_subtypes)

    soft_colors = color_lexicon.expand_all(query.global_colors)
    if soft_colors:
        preferred = [item for item in base if item.normalized_colors & soft_colors]
        if preferred:
            base = preferred
    return PrefilterResult(strict=[], relaxed=base, reason=reason)


def score_item(item: WardrobeItem, kind: LayerKind, query: PromptQuery, coherence: Optional[str] = None) -> int:
    """Additive prompt affinity of ``item`` when used as ``kind``."""

    score = 0
    haystack = item.haystack
    colors = item.normalized_colors

    if query.dress_code and contains_insensitive(item.dress_code, query.dress_code):
        score += SCORE_DRESS_CODE
    if query.occasion and contains_insensitive(haystack, query.occasion):
        score += SCORE_OCCASION

    required = query.required_colors_by_kind.get(kind)
    if required and colors & required:
        score += SCORE_BOUND_COLOR

    soft_colors = color_lexicon.expand_all(query.global_colors)
    if soft_colors and colors & soft_colors:
        score += SCORE_SOFT_COLOR

    palette = query.palette
    if palette.is_monochrome:
        hue = coherence or palette.color
        score += SCORE_COHERENCE_MATCH if hue and hue in colors else SCORE_COHERENCE_MISS
    elif palette.kind is PaletteKind.NEUTRAL:
        if colors & NEUTRALS:
            score += SCORE_NEUTRAL
    elif palette.kind is PaletteKind.PASTEL:
        if contains_insensitive(item.style, "pastel"):
            score += SCORE_PASTEL
    elif palette.kind is PaletteKind.EARTH:
        if colors & EARTH_TONES:
            score += SCORE_EARTH

    soft_subtypes = query.subtype_by_kind.get(kind)
    if soft_subtypes and any(contains_insensitive(haystack, word) for word in soft_subtypes):
        score += SCORE_SOFT_SUBTYPE
    if query.style_tags and any(contains_insensitive(haystack, tag) for tag in query.style_tags):
        score += SCORE_STYLE_TAG

    if kind is LayerKind.ACCESSORY and query.metallic and contains_insensitive(haystack, query.metallic):
        score += SCORE_METALLIC

    if kind is LayerKind.OUTERWEAR:
        if query.prefer_outerwear:
            score += SCORE_OUTERWEAR_PREFERRED
        if query.avoid_outerwear:
            score += SCORE_OUTERWEAR_AVOIDED
    return score


def top_band(scored: Sequence[Tuple[WardrobeItem, int]], margin: int = DEFAULT_BAND_MARGIN) -> List[WardrobeItem]:
    if not scored:
        return []
    threshold = max(score for _, score in scored) - margin
    return [item for item, score in scored if score >= threshold]


def pick_from_top_band(
    scored: Sequence[Tuple[WardrobeItem, int]],
    rng: random.Random,
    margin: int = DEFAULT_BAND_MARGIN,
) -> Optional[WardrobeItem]:
    """Uniformly choose among the items scoring within ``margin`` of the best."""

    if not scored:
        return None
    band = top_band(scored, margin) or [item for item, _ in scored]
    return rng.choice(band)


def _first_color(colors: FrozenSet[str]) -> Optional[str]:
    return min(colors) if colors else None


class OutfitEngine:
    """Compose outfit candidates for a parsed prompt from a user's wardrobe."""

    def __init__(
        self,
        repository: ItemRepository,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        band_margin: int = DEFAULT_BAND_MARGIN,
        max_items: int = DEFAULT_MAX_ITEMS,
        rng: random.Random | None = None,
    ) -> None:
        self.repository = repository
        self.fetch_limit = fetch_limit
        self.band_margin = band_margin
        self.max_items = max_items
        self.rng = rng or random.Random()

    async def _fetch(self, user_id: str, kind: LayerKind) -> List[WardrobeItem]:
        fetch = self.repository.fetch_items
        try:
            if inspect.iscoroutinefunction(fetch):
                items = await fetch(user_id, kind, self.fetch_limit)
            else:
                items = await asyncio.to_thread(fetch, user_id, kind, self.fetch_limit)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Fetching %s items failed, treating as empty: %s", kind.value, exc)
            return []
        return list(items or [])[: self.fetch_limit]

    async def fetch_pools(self, user_id: str) -> Dict[LayerKind, List[WardrobeItem]]:
        results = await asyncio.gather(*(self._fetch(user_id, kind) for kind in ALL_KINDS))
        return dict(zip(ALL_KINDS, results))

    def _pick(self, ctx: _GenerationContext, kind: LayerKind) -> Optional[WardrobeItem]:
        if kind in ctx.locked:
            item = ctx.locked[kind]
            ctx.picked[kind] = item
            return item
        result = prefilter(ctx.pools.get(kind, []), kind, ctx.query, ctx.coherence)
        pool = result.pool
        scored = [(item, score_item(item, kind, ctx.query, ctx.coherence)) for item in pool]
        item = pick_from_top_band(scored, self.rng, self.band_margin)
        if item is None:
            return None
        ctx.picked[kind] = item
        if result.reason.relaxed:
            ctx.reasons[kind] = result.reason
        return item

    def _infer_coherence(self, ctx: _GenerationContext) -> None:
        if ctx.coherence or not ctx.query.palette.is_monochrome:
            return
        if LayerKind.DRESS in ctx.picked:
            ctx.coherence = _first_color(ctx.picked[LayerKind.DRESS].normalized_colors)
        elif LayerKind.TOP in ctx.picked and LayerKind.BOTTOM in ctx.picked:
            top_colors = ctx.picked[LayerKind.TOP].normalized_colors
            bottom_colors = ctx.picked[LayerKind.BOTTOM].normalized_colors
            ctx.coherence = _first_color(top_colors & bottom_colors) or _first_color(top_colors) or _first_color(
                bottom_colors
            )
        if ctx.coherence:
            logger.debug("Inferred monochrome coherence color %s", ctx.coherence)

    def _attempt_dress(self, ctx: _GenerationContext) -> bool:
        return self._pick(ctx, LayerKind.DRESS) is not None

    def _attempt_two_piece(self, ctx: _GenerationContext) -> bool:
        if self._pick(ctx, LayerKind.TOP) is None:
            return False
        if self._pick(ctx, LayerKind.BOTTOM) is None:
            ctx.picked.pop(LayerKind.TOP, None)
            ctx.reasons.pop(LayerKind.TOP, None)
            return False
        return True

    def _choose_base(self, ctx: _GenerationContext) -> bool:
        locked = ctx.locked
        query = ctx.query
        if LayerKind.DRESS in locked:
            attempts = [self._attempt_dress]
        elif LayerKind.TOP in locked or LayerKind.BOTTOM in locked:
            attempts = [self._attempt_two_piece]
        else:
            has_bottom_requirement = bool(
                query.required_subtypes_by_kind.get(LayerKind.BOTTOM)
            ) or LayerKind.BOTTOM in query.required_kinds
            if has_bottom_requirement:
                use_dress = False
            elif query.wants_dress_base is not None:
                use_dress = query.wants_dress_base
            else:
                use_dress = self.rng.random() < 0.5
            attempts = (
                [self._attempt_dress, self._attempt_two_piece]
                if use_dress
                else [self._attempt_two_piece, self._attempt_dress]
            )
        for attempt in attempts:
            if attempt(ctx):
                self._infer_coherence(ctx)
                return True
        return False

    def _outerwear_probability(self, query: PromptQuery) -> float:
        if query.prefer_outerwear and not query.avoid_outerwear:
            return OUTERWEAR_PREFERRED_PROBABILITY
        if query.avoid_outerwear and not query.prefer_outerwear:
            return OUTERWEAR_AVOIDED_PROBABILITY
        return OUTERWEAR_DEFAULT_PROBABILITY

    def _add_optional_layers(self, ctx: _GenerationContext) -> None:
        for kind in (LayerKind.OUTERWEAR, LayerKind.BAG, LayerKind.ACCESSORY):
            probability = (
                self._outerwear_probability(ctx.query) if kind is LayerKind.OUTERWEAR else OPTIONAL_PROBABILITY
            )
            wanted = (
                kind in ctx.locked
                or kind in ctx.query.required_kinds
                or self.rng.random() < probability
            )
            if wanted:
                self._pick(ctx, kind)

    def _apply_cap(self, ctx: _GenerationContext) -> None:
        for kind in CAP_DROP_ORDER:
            if len(ctx.picked) <= self.max_items:
                return
            if kind in ctx.picked and kind not in ctx.locked:
                ctx.picked.pop(kind)
                ctx.reasons.pop(kind, None)
                logger.debug("Dropped %s to respect the %s item cap", kind.value, self.max_items)

    def assemble(
        self,
        query: PromptQuery,
        pools: Mapping[LayerKind, List[WardrobeItem]],
        locked: Mapping[LayerKind, WardrobeItem] | None = None,
    ) -> Optional[OutfitCandidate]:
        """Build one candidate from already fetched pools."""

        coherence = None
        if query.palette.is_monochrome:
            coherence = query.palette.color or _first_color(query.global_colors)
        ctx = _GenerationContext(query=query, pools=pools, locked=dict(locked or {}), coherence=coherence)

        if self._pick(ctx, LayerKind.SHOES) is None:
            logger.info("No shoes available for the prompt; no candidate")
            return None
        if not self._choose_base(ctx):
            logger.info("No viable base (dress or top and bottom); no candidate")
            return None

        self._add_optional_layers(ctx)
        self._apply_cap(ctx)

        notes = [
            ctx.reasons[kind].describe(kind)
            for kind in DISPLAY_ORDER
            if kind in ctx.reasons and kind in ctx.picked
        ]
        candidate = OutfitCandidate(
            items_by_kind=ctx.picked,
            soft_match_note=" ".join(note for note in notes if note) or None,
            relax_reasons={kind: reason for kind, reason in ctx.reasons.items() if kind in ctx.picked},
        )
        logger.info(
            "Generated candidate %s with layers %s",
            candidate.candidate_id,
            [kind.value for kind, _ in candidate.ordered_pairs],
        )
        return candidate

    async def generate_candidate(
        self,
        query: PromptQuery,
        user_id: str,
        locked: Mapping[LayerKind, WardrobeItem] | None = None,
    ) -> Optional[OutfitCandidate]:
        """Fetch the user's wardrobe and build one candidate, or ``None``."""

        pools = await self.fetch_pools(user_id)
        logger.debug("Fetched pools %s", {kind.value: len(items) for kind, items in pools.items()})
        return self.assemble(query, pools, locked)

    def generate_candidate_sync(
        self,
        query: PromptQuery,
        user_id: str,
        locked: Mapping[LayerKind, WardrobeItem] | None = None,
    ) -> Optional[OutfitCandidate]:
        """Blocking variant for callers without a running event loop."""

        return asyncio.run(self.generate_candidate(query, user_id, locked))


__all__ = [
    "ItemRepository",
    "OutfitEngine",
    "PrefilterResult",
    "hard_color_set",
    "prefilter",
    "score_item",
    "top_band",
    "pick_from_top_band",
]
