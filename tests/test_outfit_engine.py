"""Outfit engine filtering, scoring and assembly tests."""

from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import List

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic import outfit_engine
from logic.layer_classifier import bucket_items
from logic.outfit_engine import OutfitEngine, pick_from_top_band, prefilter, score_item, top_band
from logic.prompt_parser import parse_prompt
from models.color_lexicon import PaletteMode
from models.outfit import RelaxKind
from models.prompt_query import PromptQuery
from models.subtype_lexicon import CanonicalSubtype
from models.taxonomy import DISPLAY_ORDER, LayerKind
from models.wardrobe_item import WardrobeItem
from tools.wardrobe_store import InMemoryWardrobeStore

USER_ID = "user-1"


def _item(item_id: str, category: str, sub_category: str, colors: List[str], **extra: object) -> WardrobeItem:
    return WardrobeItem(
        item_id=item_id,
        user_id=USER_ID,
        image_url=f"https://example.com/{item_id}.jpg",
        category=category,
        sub_category=sub_category,
        colors=colors,
        **extra,
    )


BLACK_BOOTS = _item("black_boots", "Shoes", "Chelsea Boots", ["black"])
WHITE_BOOTS = _item("white_boots", "Shoes", "Ankle Boots", ["white"])
RED_BOOTS = _item("red_boots", "Shoes", "Ankle Boots", ["red"])
WHITE_SNEAKERS = _item("white_sneakers", "Shoes", "Sneakers", ["white"])
BLACK_LOAFERS = _item("black_loafers", "Shoes", "Loafers", ["black"])
WHITE_TEE = _item("white_tee", "Tops", "Tee", ["white"])
BLACK_BLOUSE = _item("black_blouse", "Tops", "Blouse", ["black"])
BLUE_JEANS = _item("blue_jeans", "Bottoms", "Jeans", ["navy"])
BLACK_TROUSERS = _item("black_trousers", "Bottoms", "Trousers", ["black"])
BLACK_DRESS = _item("black_dress", "Dresses", "Slip Dress", ["black"])
RED_DRESS = _item("red_dress", "Dresses", "Midi Dress", ["red"])
CAMEL_COAT = _item("camel_coat", "Outerwear", "Wool Coat", ["camel"])
BLACK_TOTE = _item("black_tote", "Bags", "Tote", ["black"])
RED_TOTE = _item("red_tote", "Bags", "Tote", ["red"])
BROWN_BELT = _item("brown_belt", "Accessories", "Leather Belt", ["brown"])


def _pools(*items: WardrobeItem):
    return bucket_items(items)


def _store(*items: WardrobeItem) -> InMemoryWardrobeStore:
    store = InMemoryWardrobeStore()
    for item in items:
        store.create_item(item)
    return store


def _engine(seed: int = 0, **kwargs) -> OutfitEngine:
    return OutfitEngine(InMemoryWardrobeStore(), rng=random.Random(seed), **kwargs)


def test_top_band_uses_margin_below_best_score() -> None:
    scored = [(WHITE_TEE, 100), (BLACK_BLOUSE, 95), (BLACK_DRESS, 80)]
    assert top_band(scored, margin=10) == [WHITE_TEE, BLACK_BLOUSE]

    negative = [(WHITE_TEE, -10), (BLACK_BLOUSE, -15), (BLACK_DRESS, -40)]
    assert top_band(negative, margin=10) == [WHITE_TEE, BLACK_BLOUSE]
    assert pick_from_top_band([], random.Random(0)) is None


def test_prefilter_keeps_strict_matches() -> None:
    query = parse_prompt("black boots")
    result = prefilter([BLACK_BOOTS, WHITE_BOOTS, BLACK_LOAFERS], LayerKind.SHOES, query)
    assert result.strict == [BLACK_BOOTS]
    assert result.relaxed == []
    assert not result.reason.relaxed


def test_prefilter_relaxes_subtype_when_color_exists() -> None:
    query = parse_prompt("black boots")
    result = prefilter([WHITE_SNEAKERS, BLACK_LOAFERS], LayerKind.SHOES, query)
    assert result.strict == []
    assert result.pool == [BLACK_LOAFERS]
    assert result.reason.kind is RelaxKind.SUBTYPE
    assert result.reason.describe(LayerKind.SHOES) == "Closest match for shoes (no boots found)."


def test_prefilter_relaxes_color_when_no_item_has_it() -> None:
    query = parse_prompt("green boots")
    result = prefilter([WHITE_SNEAKERS, BLACK_BOOTS], LayerKind.SHOES, query)
    assert result.pool == [BLACK_BOOTS]
    assert result.reason.kind is RelaxKind.COLOR


def test_prefilter_relaxes_both_and_prefers_prompt_colors() -> None:
    query = parse_prompt("red top with green heels")
    result = prefilter([WHITE_BOOTS, RED_BOOTS, BLACK_LOAFERS], LayerKind.SHOES, query)
    assert result.reason.kind is RelaxKind.BOTH
    assert result.reason.subtypes == frozenset({CanonicalSubtype.HEELS})
    assert result.pool == [RED_BOOTS]


def test_prefilter_strict_monochrome_uses_coherence_color() -> None:
    query = parse_prompt("monochrome")
    assert prefilter([BLACK_TOTE, RED_TOTE], LayerKind.BAG, query).strict == [BLACK_TOTE, RED_TOTE]
    assert prefilter([BLACK_TOTE, RED_TOTE], LayerKind.BAG, query, coherence="red").strict == [RED_TOTE]


def test_score_item_rewards_prompt_affinity() -> None:
    query = parse_prompt("black boots for the office, smart casual")
    office_boots = _item("office_boots", "Shoes", "Boots", ["black"], dress_code="Smart Casual", custom_tags=["office"])
    plain_boots = _item("plain_boots", "Shoes", "Boots", ["white"])

    expected = (
        outfit_engine.SCORE_DRESS_CODE
        + outfit_engine.SCORE_OCCASION
        + outfit_engine.SCORE_BOUND_COLOR
        + outfit_engine.SCORE_SOFT_COLOR
        + outfit_engine.SCORE_SOFT_SUBTYPE
    )
    assert score_item(office_boots, LayerKind.SHOES, query) == expected
    assert score_item(plain_boots, LayerKind.SHOES, query) == outfit_engine.SCORE_SOFT_SUBTYPE


def test_score_item_monochrome_coherence_and_outerwear() -> None:
    query = PromptQuery(palette=PaletteMode.monochrome("black", strict=False), prefer_outerwear=True)
    assert score_item(BLACK_TOTE, LayerKind.BAG, query) == outfit_engine.SCORE_COHERENCE_MATCH
    assert score_item(RED_TOTE, LayerKind.BAG, query) == outfit_engine.SCORE_COHERENCE_MISS
    assert score_item(CAMEL_COAT, LayerKind.OUTERWEAR, query) == (
        outfit_engine.SCORE_COHERENCE_MISS + outfit_engine.SCORE_OUTERWEAR_PREFERRED
    )


def test_no_shoes_means_no_candidate() -> None:
    engine = _engine()
    pools = _pools(WHITE_TEE, BLUE_JEANS, BLACK_DRESS)
    assert engine.assemble(parse_prompt("casual day"), pools) is None


def test_no_base_means_no_candidate() -> None:
    engine = _engine()
    assert engine.assemble(parse_prompt("casual day"), _pools(WHITE_SNEAKERS, WHITE_TEE)) is None


def test_candidate_is_complete_and_display_ordered() -> None:
    pools = _pools(WHITE_SNEAKERS, WHITE_TEE, BLUE_JEANS, CAMEL_COAT, BLACK_TOTE, BROWN_BELT, BLACK_DRESS)
    for seed in range(20):
        candidate = _engine(seed).assemble(parse_prompt("easy weekend outfit"), pools)
        assert candidate is not None
        assert candidate.is_complete
        kinds = [kind for kind, _ in candidate.ordered_pairs]
        assert kinds == [kind for kind in DISPLAY_ORDER if kind in kinds]
        assert not (LayerKind.DRESS in kinds and LayerKind.TOP in kinds)


def test_same_seed_gives_same_outfit() -> None:
    pools = _pools(WHITE_SNEAKERS, BLACK_BOOTS, WHITE_TEE, BLACK_BLOUSE, BLUE_JEANS, BLACK_TROUSERS, BLACK_DRESS)
    query = parse_prompt("weekend look")
    first = _engine(42).assemble(query, pools)
    second = _engine(42).assemble(query, pools)
    assert [item.item_id for item in first.ordered_items] == [item.item_id for item in second.ordered_items]
    assert first.candidate_id != second.candidate_id


def test_relaxed_layer_gets_a_note() -> None:
    pools = _pools(BLACK_BOOTS, WHITE_SNEAKERS, WHITE_TEE, BLUE_JEANS)
    candidate = _engine().assemble(parse_prompt("green boots"), pools)
    assert candidate.items_by_kind[LayerKind.SHOES] is BLACK_BOOTS
    assert candidate.soft_match_note == "Closest match for shoes (relaxed color)."
    assert candidate.relax_reasons[LayerKind.SHOES].kind is RelaxKind.COLOR


def test_strict_match_has_no_note() -> None:
    pools = _pools(BLACK_BOOTS, WHITE_SNEAKERS, WHITE_TEE, BLUE_JEANS)
    candidate = _engine().assemble(parse_prompt("black boots"), pools)
    assert candidate.items_by_kind[LayerKind.SHOES] is BLACK_BOOTS
    assert candidate.soft_match_note is None


def test_dress_prompt_prefers_dress_base_and_bound_colors() -> None:
    pools = _pools(BLACK_BOOTS, WHITE_SNEAKERS, WHITE_TEE, BLUE_JEANS, BLACK_DRESS, RED_DRESS)
    for seed in range(20):
        candidate = _engine(seed).assemble(parse_prompt("red dress with black boots"), pools)
        assert candidate.items_by_kind[LayerKind.DRESS] is RED_DRESS
        assert candidate.items_by_kind[LayerKind.SHOES] is BLACK_BOOTS


def test_bottom_requirement_forces_two_piece() -> None:
    pools = _pools(WHITE_SNEAKERS, WHITE_TEE, BLUE_JEANS, BLACK_TROUSERS, BLACK_DRESS)
    for seed in range(20):
        candidate = _engine(seed).assemble(parse_prompt("dress up my jeans"), pools)
        assert LayerKind.DRESS not in candidate.items_by_kind
        assert candidate.items_by_kind[LayerKind.BOTTOM] is BLUE_JEANS


def test_strict_monochrome_follows_inferred_base_color() -> None:
    pools = _pools(WHITE_SNEAKERS, BLACK_DRESS, BLACK_TOTE, RED_TOTE)
    bags = []
    for seed in range(40):
        candidate = _engine(seed).assemble(parse_prompt("monochrome"), pools)
        bag = candidate.items_by_kind.get(LayerKind.BAG)
        if bag is not None:
            bags.append(bag.item_id)
    assert bags
    assert set(bags) == {"black_tote"}


def test_monochrome_scoring_favors_coherence_color() -> None:
    query = PromptQuery(
        palette=PaletteMode.monochrome("black", strict=False),
        required_kinds=frozenset({LayerKind.BAG}),
    )
    greys = [_item(f"grey_tote_{index}", "Bags", "Tote", ["charcoal"]) for index in range(4)]
    pools = _pools(BLACK_BOOTS, BLACK_DRESS, BLACK_TOTE, *greys)
    engine = _engine(5)

    picks = [engine.assemble(query, pools).items_by_kind[LayerKind.BAG].item_id for _ in range(200)]
    assert picks.count("black_tote") > 150


def test_weather_moves_outerwear_probability() -> None:
    pools = _pools(WHITE_SNEAKERS, BLACK_DRESS, CAMEL_COAT)

    def outerwear_rate(query: PromptQuery) -> float:
        engine = _engine(3)
        hits = sum(
            LayerKind.OUTERWEAR in engine.assemble(query, pools).items_by_kind for _ in range(400)
        )
        return hits / 400

    assert outerwear_rate(parse_prompt("cold morning")) > 0.7
    assert outerwear_rate(parse_prompt("hot afternoon")) < 0.25


def test_locked_items_are_used_verbatim() -> None:
    pools = _pools(BLACK_BOOTS, WHITE_TEE, BLUE_JEANS, BLACK_DRESS)
    locked = {LayerKind.SHOES: WHITE_SNEAKERS}
    candidate = _engine().assemble(parse_prompt("black boots"), pools, locked)
    assert candidate.items_by_kind[LayerKind.SHOES] is WHITE_SNEAKERS
    assert LayerKind.SHOES not in candidate.relax_reasons


def test_locked_base_decides_structure() -> None:
    pools = _pools(WHITE_SNEAKERS, WHITE_TEE, BLUE_JEANS, RED_DRESS)
    for seed in range(10):
        dress_locked = _engine(seed).assemble(parse_prompt("jeans"), pools, {LayerKind.DRESS: BLACK_DRESS})
        assert dress_locked.items_by_kind[LayerKind.DRESS] is BLACK_DRESS
        assert LayerKind.BOTTOM not in dress_locked.items_by_kind

        top_locked = _engine(seed).assemble(parse_prompt("red dress"), pools, {LayerKind.TOP: BLACK_BLOUSE})
        assert top_locked.items_by_kind[LayerKind.TOP] is BLACK_BLOUSE
        assert LayerKind.DRESS not in top_locked.items_by_kind


def test_item_cap_drops_accessory_then_bag() -> None:
    pools = _pools(WHITE_SNEAKERS, WHITE_TEE, BLUE_JEANS, CAMEL_COAT, BLACK_TOTE, BROWN_BELT)
    query = parse_prompt("coat bag belt with jeans")
    candidate = _engine(max_items=4).assemble(query, pools)
    assert set(candidate.items_by_kind) == {LayerKind.TOP, LayerKind.BOTTOM, LayerKind.OUTERWEAR, LayerKind.SHOES}


def test_item_cap_never_drops_locked_layers() -> None:
    pools = _pools(WHITE_SNEAKERS, WHITE_TEE, BLUE_JEANS, CAMEL_COAT, BLACK_TOTE, BROWN_BELT)
    query = parse_prompt("coat bag belt with jeans")
    candidate = _engine(max_items=4).assemble(query, pools, {LayerKind.ACCESSORY: BROWN_BELT})
    assert set(candidate.items_by_kind) == {LayerKind.TOP, LayerKind.BOTTOM, LayerKind.SHOES, LayerKind.ACCESSORY}


class _FlakyStore(InMemoryWardrobeStore):
    def __init__(self, failing: set) -> None:
        super().__init__()
        self.failing = failing

    def fetch_items(self, user_id: str, kind: LayerKind, limit: int) -> List[WardrobeItem]:
        if kind in self.failing:
            raise RuntimeError("backend unavailable")
        return super().fetch_items(user_id, kind, limit)


class _AsyncRepository:
    def __init__(self, store: InMemoryWardrobeStore) -> None:
        self.store = store
        self.calls: List[LayerKind] = []

    async def fetch_items(self, user_id: str, kind: LayerKind, limit: int) -> List[WardrobeItem]:
        self.calls.append(kind)
        return self.store.fetch_items(user_id, kind, limit)


@pytest.mark.asyncio
async def test_failing_fetch_is_treated_as_empty() -> None:
    store = _FlakyStore({LayerKind.BAG})
    for item in (WHITE_SNEAKERS, WHITE_TEE, BLUE_JEANS, BLACK_TOTE):
        store.create_item(item)
    engine = OutfitEngine(store, rng=random.Random(1))

    pools = await engine.fetch_pools(USER_ID)
    assert pools[LayerKind.BAG] == []
    candidate = await engine.generate_candidate(parse_prompt("tote bag"), USER_ID)
    assert candidate is not None
    assert LayerKind.BAG not in candidate.items_by_kind

    store.failing.add(LayerKind.SHOES)
    assert await engine.generate_candidate(parse_prompt("tote bag"), USER_ID) is None


@pytest.mark.asyncio
async def test_async_repository_fetches_every_layer() -> None:
    repository = _AsyncRepository(_store(BLACK_BOOTS, BLACK_BLOUSE, BLACK_TROUSERS))
    engine = OutfitEngine(repository, rng=random.Random(2), fetch_limit=1)

    candidate = await engine.generate_candidate(parse_prompt("all black"), USER_ID)
    assert sorted(repository.calls) == sorted(LayerKind)
    assert [item.item_id for item in candidate.ordered_items] == ["black_blouse", "black_trousers", "black_boots"]


def test_generate_candidate_sync_runs_without_event_loop() -> None:
    engine = OutfitEngine(_store(BLACK_BOOTS, BLACK_DRESS), rng=random.Random(0))
    candidate = engine.generate_candidate_sync(parse_prompt("black dress"), USER_ID)
    assert [item.item_id for item in candidate.ordered_items] == ["black_dress", "black_boots"]
