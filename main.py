"""Command line entrypoint: parse a prompt and print outfit candidates."""

import argparse
import asyncio
import json
import random
from typing import List, Optional

from evaluation.scenarios import DEMO_USER_ID, seed_wardrobe
from logic.prompt_parser import parse_prompt
from stylist_app.app import PromptStylistApp
from stylist_app.config import StylistConfig
from tools.wardrobe_store import InMemoryWardrobeStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compose outfits from a free-text prompt.")
    parser.add_argument("prompt", help='Styling request, e.g. "all black smart casual with boots"')
    parser.add_argument("--user-id", default=DEMO_USER_ID, help="Wardrobe owner to draw items from")
    parser.add_argument("--count", type=int, default=None, help="Number of candidates to generate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible picks")
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use an in-memory sample wardrobe instead of the configured store",
    )
    parser.add_argument("--parse-only", action="store_true", help="Print the parsed query and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    config = StylistConfig.from_env()
    wardrobe_store = None
    if args.demo:
        wardrobe_store = InMemoryWardrobeStore()
        seed_wardrobe(wardrobe_store, args.user_id)

    app = PromptStylistApp(
        config=config,
        wardrobe_store=wardrobe_store,
        rng=random.Random(args.seed) if args.seed is not None else None,
    )
    if args.parse_only:
        print(json.dumps(parse_prompt(args.prompt).to_dict(), indent=2))
        return

    response = asyncio.run(app.prompt_stylist.start_deck(args.user_id, args.prompt, args.count))
    print(json.dumps(response, indent=2, default=str))


if __name__ == "__main__":
    main()
