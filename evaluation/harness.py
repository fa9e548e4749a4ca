"""Lightweight evaluation harness for seeded prompt scenarios."""

from __future__ import annotations

import asyncio
import random
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Dict, List

from evaluation.scenarios import PromptScenario, SCENARIOS, seed_wardrobe
from models import color_lexicon
from stylist_app.app import PromptStylistApp
from stylist_app.config import StylistConfig
from tools.outfit_store import InMemoryOutfitStore
from tools.wardrobe_store import SQLiteWardrobeStore


def _items_by_kind(candidate: Dict[str, object]) -> Dict[str, Dict[str, object]]:
    return {item["kind"]: item for item in candidate.get("items", [])}  # type: ignore[union-attr]


def _evaluate_expectations(expectations: Dict[str, object], candidates: List[Dict[str, object]]) -> Dict[str, object]:
    checks: Dict[str, bool] = {}
    checks["min_candidates"] = len(candidates) >= int(expectations.get("min_candidates", 1))
    if "max_candidates" in expectations:
        checks["max_candidates"] = len(candidates) <= int(expectations["max_candidates"])
    checks["complete"] = all(candidate.get("is_complete") for candidate in candidates)

    if expectations.get("base") == "dress":
        checks["base"] = all("dress" in _items_by_kind(candidate) for candidate in candidates)
    elif expectations.get("base") == "two_piece":
        checks["base"] = all(
            {"top", "bottom"} <= set(_items_by_kind(candidate)) for candidate in candidates
        )

    for kind, item_id in dict(expectations.get("kind_item", {})).items():
        checks[f"kind_item:{kind}"] = all(
            _items_by_kind(candidate).get(kind, {}).get("item_id") == item_id for candidate in candidates
        )

    color = expectations.get("all_items_color")
    if color:
        checks["all_items_color"] = all(
            color in color_lexicon.normalize_all(item["colors"])
            for candidate in candidates
            for item in candidate.get("items", [])  # type: ignore[union-attr]
        )

    if "note_expected" in expectations:
        checks["note_expected"] = all(
            bool(candidate.get("soft_match_note")) == bool(expectations["note_expected"])
            for candidate in candidates
        )
    return {"passed": all(checks.values()), "checks": checks}


def run_scenario(scenario: PromptScenario, user_id: str = "eval_user", seed: int = 7) -> Dict[str, object]:
    with TemporaryDirectory() as tmpdir:
        store = SQLiteWardrobeStore(Path(tmpdir) / "wardrobe.db")
        seed_wardrobe(store, user_id, scenario.wardrobe_items)
        app = PromptStylistApp(
            config=StylistConfig(),
            wardrobe_store=store,
            outfit_store=InMemoryOutfitStore(),
            rng=random.Random(seed),
        )
        response = asyncio.run(app.prompt_stylist.start_deck(user_id, scenario.prompt, scenario.count))
        candidates = response.get("candidates", [])
        evaluation = _evaluate_expectations(scenario.expectations, candidates)
        return {
            "scenario": scenario.name,
            "passed": evaluation["passed"],
            "checks": evaluation["checks"],
            "candidate_count": len(candidates),
            "response": response,
        }


def run_evaluation_suite(seed: int = 7) -> List[Dict[str, object]]:
    return [run_scenario(scenario, seed=seed) for scenario in SCENARIOS]


def run_smoke_checks() -> List[str]:
    results = run_evaluation_suite()
    return [f"{result['scenario']}: {'passed' if result['passed'] else 'failed'}" for result in results]


__all__ = ["run_evaluation_suite", "run_scenario", "run_smoke_checks"]
