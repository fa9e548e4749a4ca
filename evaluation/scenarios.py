"""Evaluation scenarios exercising prompts against a fixed sample wardrobe."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from models.wardrobe_item import from_raw_metadata
from tools.wardrobe_store import WardrobeStore

DEMO_USER_ID = "demo_user"


@dataclass
class PromptScenario:
    name: str
    description: str
    prompt: str
    expectations: Dict[str, object]
    count: int = 3
    wardrobe_items: Optional[List[Dict[str, object]]] = field(default=None)


def _item(item_id: str, category: str, sub_category: str, colors: List[str], **extra: object) -> Dict[str, object]:
    return {
        "item_id": item_id,
        "image_url": f"https://example.com/{item_id}.jpg",
        "category": category,
        "sub_category": sub_category,
        "colors": colors,
        **extra,
    }


def wardrobe_fixtures() -> List[Dict[str, object]]:
    return [
        _item("dress_red_midi", "Dresses", "Midi Dress", ["Red"], dress_code="Smart Casual", style="romantic"),
        _item("dress_black_slip", "Dresses", "Slip Dress", ["Jet Black"], dress_code="Smart", style="minimal"),
        _item("top_black_blouse", "Tops", "Blouse", ["black"], dress_code="Smart Casual", material="silk"),
        _item("top_white_tee", "Tops", "T-Shirt", ["white"], dress_code="Casual"),
        _item("top_grey_hoodie", "Tops", "Hoodie", ["charcoal"], dress_code="Casual", style="sporty"),
        _item("top_cream_sweater", "Tops", "Sweater", ["cream"], dress_code="Casual", material="wool"),
        _item("bottom_black_trousers", "Bottoms", "Trousers", ["black"], dress_code="Smart Casual"),
        _item("bottom_blue_jeans", "Bottoms", "Jeans", ["light blue"], dress_code="Casual", fit="straight"),
        _item("bottom_beige_skirt", "Bottoms", "Skirt", ["beige"], dress_code="Smart Casual"),
        _item("shoes_black_boots", "Shoes", "Chelsea Boots", ["black"], dress_code="Smart Casual"),
        _item("shoes_black_heels", "Shoes", "Heels", ["black"], dress_code="Smart"),
        _item("shoes_white_sneakers", "Shoes", "Sneakers", ["white"], dress_code="Casual", style="sporty"),
        _item("shoes_brown_loafers", "Shoes", "Loafers", ["cognac"], dress_code="Smart Casual"),
        _item("outer_black_blazer", "Outerwear", "Blazer", ["black"], dress_code="Smart Casual"),
        _item("outer_camel_coat", "Outerwear", "Coat", ["camel"], dress_code="Smart", material="wool"),
        _item("bag_black_tote", "Bags", "Tote", ["black"], dress_code="Casual"),
        _item("bag_tan_crossbody", "Bags", "Crossbody", ["tan"], dress_code="Casual"),
        _item("acc_black_belt", "Accessories", "Belt", ["black"], material="leather"),
        _item("acc_silver_jewelry", "Accessories", "Jewelry", ["grey"], custom_tags=["silver", "necklace"]),
    ]


def seed_wardrobe(
    store: WardrobeStore,
    user_id: str = DEMO_USER_ID,
    items: Optional[List[Dict[str, object]]] = None,
) -> None:
    """Insert fixture items for ``user_id`` with staggered ``added_at`` times."""

    now = datetime.now(timezone.utc)
    for offset, raw in enumerate(items if items is not None else wardrobe_fixtures()):
        metadata = {"added_at": now - timedelta(minutes=offset), **raw, "user_id": user_id}
        store.create_item(from_raw_metadata(metadata))


SCENARIOS: List[PromptScenario] = [
    PromptScenario(
        name="monochrome_black_boots",
        description="Strict monochrome with a bound footwear subtype.",
        prompt="all black smart casual with boots",
        expectations={
            "min_candidates": 1,
            "all_items_color": "black",
            "kind_item": {"shoes": "shoes_black_boots"},
            "note_expected": False,
        },
    ),
    PromptScenario(
        name="red_dress_black_heels",
        description="Bound colors on a dress base and on shoes.",
        prompt="red dress and black heels",
        expectations={
            "min_candidates": 1,
            "base": "dress",
            "kind_item": {"dress": "dress_red_midi", "shoes": "shoes_black_heels"},
            "note_expected": False,
        },
    ),
    PromptScenario(
        name="blue_jeans_date",
        description="An explicit bottom forces a top and bottom base.",
        prompt="blue jeans for a casual date",
        expectations={
            "min_candidates": 1,
            "base": "two_piece",
            "kind_item": {"bottom": "bottom_blue_jeans"},
        },
    ),
    PromptScenario(
        name="missing_green_boots",
        description="No green footwear exists, so the color requirement relaxes.",
        prompt="green boots for a rainy day",
        expectations={
            "min_candidates": 1,
            "kind_item": {"shoes": "shoes_black_boots"},
            "note_expected": True,
        },
    ),
    PromptScenario(
        name="no_shoes_no_candidates",
        description="A wardrobe without footwear never produces candidates.",
        prompt="smart casual office look",
        expectations={"min_candidates": 0, "max_candidates": 0},
        wardrobe_items=[item for item in wardrobe_fixtures() if item["category"] != "Shoes"],
    ),
]


__all__ = ["PromptScenario", "SCENARIOS", "DEMO_USER_ID", "wardrobe_fixtures", "seed_wardrobe"]
