"""Prompt stylist app bootstrap."""

import logging
import random

from stylist_app.config import StylistConfig
from stylist_app.logging_config import configure_logging, log_event
from agents.prompt_stylist_agent import PromptStylistAgent
from logic.outfit_engine import OutfitEngine
from memory.deck_store import InMemoryDeckStore
from tools.outfit_store import InMemoryOutfitStore, OutfitStore, SQLiteOutfitStore
from tools.wardrobe_store import InMemoryWardrobeStore, SQLiteWardrobeStore, WardrobeStore

LOGGER = logging.getLogger(__name__)


class PromptStylistApp:
    """Wires together the stores, the outfit engine and the prompt agent."""

    def __init__(
        self,
        config: StylistConfig | None = None,
        wardrobe_store: WardrobeStore | None = None,
        outfit_store: OutfitStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or StylistConfig.from_env()
        configure_logging(self.config.log_level)

        self.wardrobe_store = wardrobe_store or self._build_wardrobe_store()
        self.outfit_store = outfit_store or self._build_outfit_store()
        self.deck_store = InMemoryDeckStore()
        self.engine = OutfitEngine(
            self.wardrobe_store,
            fetch_limit=self.config.fetch_limit,
            band_margin=self.config.band_margin,
            max_items=self.config.max_items,
            rng=rng,
        )
        self.prompt_stylist = PromptStylistAgent(
            engine=self.engine,
            wardrobe_store=self.wardrobe_store,
            outfit_store=self.outfit_store,
            deck_store=self.deck_store,
            deck_size=self.config.deck_size,
        )
        log_event(
            LOGGER,
            logging.INFO,
            "app_initialised",
            environment=self.config.environment or "local",
            wardrobe_backend=type(self.wardrobe_store).__name__,
            outfit_backend=type(self.outfit_store).__name__,
        )

    def _build_wardrobe_store(self) -> WardrobeStore:
        if self.config.wardrobe_db_path:
            return SQLiteWardrobeStore(self.config.wardrobe_db_path)
        return InMemoryWardrobeStore()

    def _build_outfit_store(self) -> OutfitStore:
        if self.config.outfits_db_path:
            return SQLiteOutfitStore(self.config.outfits_db_path)
        return InMemoryOutfitStore()


__all__ = ["PromptStylistApp"]
