"""Prompt stylist agent: turns a free-text prompt into a deck of outfit candidates."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from logic import layer_classifier
from logic.outfit_engine import OutfitEngine
from logic.prompt_parser import parse_prompt
from logic.validation import (
    CandidateView,
    DeckResponse,
    PromptRequest,
    SaveResult,
    validation_failure,
)
from memory.deck_store import DeckSession, DeckSessionError, DeckStore
from models.outfit import OutfitCandidate, OutfitRecord
from models.taxonomy import LayerKind, parse_layer_kind
from stylist_app.logging_config import log_event, operation_context
from tools.observability import instrument_tool
from tools.outfit_store import OutfitStore, OutfitStoreError
from tools.wardrobe_store import WardrobeStore

logger = logging.getLogger(__name__)

EMPTY_PROMPT_MESSAGE = "Please enter a short prompt."
NO_MATCH_MESSAGE = "Couldn't match your prompt yet. Try rephrasing or add more items."
INCOMPLETE_OUTFIT_MESSAGE = "An outfit needs shoes and either a dress or a top and bottom."
MAX_NAME_LENGTH = 120


class PromptStylistAgent:
    """Generates, refines and saves prompt based outfit decks."""

    def __init__(
        self,
        engine: OutfitEngine,
        wardrobe_store: WardrobeStore,
        outfit_store: OutfitStore,
        deck_store: DeckStore,
        deck_size: int = 2,
    ) -> None:
        self.engine = engine
        self.wardrobe_store = wardrobe_store
        self.outfit_store = outfit_store
        self.deck_store = deck_store
        self.deck_size = deck_size

    def _deck_response(self, session: DeckSession, message: Optional[str] = None) -> Dict[str, Any]:
        status = "ok" if session.candidates else "empty"
        if status == "empty" and message is None:
            message = NO_MATCH_MESSAGE
        return DeckResponse(
            status=status,
            session_id=session.session_id,
            message=message,
            query=session.query.to_dict(),
            candidates=[CandidateView.from_candidate(candidate) for candidate in session.candidates],
            locked={kind.value: item.item_id for kind, item in session.locked.items()},
        ).model_dump(mode="json")

    async def _fill_deck(self, session: DeckSession, count: int) -> List[OutfitCandidate]:
        pools = await self.engine.fetch_pools(session.user_id)
        candidates = []
        for _ in range(count):
            candidate = self.engine.assemble(session.query, pools, session.locked)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    @instrument_tool("prompt_stylist.start_deck")
    async def start_deck(self, user_id: str, prompt: str, count: Optional[int] = None) -> Dict[str, Any]:
        """Parse ``prompt`` and generate up to ``count`` candidates for ``user_id``."""

        try:
            request = PromptRequest(user_id=user_id, prompt=prompt or "", count=count)
        except ValidationError as exc:
            return validation_failure("Invalid prompt request", exc)
        if not request.prompt:
            return DeckResponse(status="error", message=EMPTY_PROMPT_MESSAGE).model_dump(mode="json")

        with operation_context("agent:prompt_stylist.start_deck", logger=logger) as correlation_id:
            query = parse_prompt(request.prompt)
            session = self.deck_store.create_session(request.user_id, request.prompt, query)
            session.candidates = await self._fill_deck(session, request.count or self.deck_size)
            log_event(
                logger,
                logging.INFO,
                "deck_started",
                correlation_id=correlation_id,
                session_id=session.session_id,
                user_id=request.user_id,
                candidate_count=len(session.candidates),
                palette=query.palette.kind.value,
            )
            return self._deck_response(session)

    @instrument_tool("prompt_stylist.skip")
    async def skip(self, session_id: str, candidate_id: str) -> Dict[str, Any]:
        """Replace one candidate with a freshly generated one."""

        session = self.deck_store.get_session(session_id)
        session.find_candidate(candidate_id)
        replacement = await self.engine.generate_candidate(session.query, session.user_id, session.locked)
        session.replace_candidate(candidate_id, replacement)
        log_event(
            logger,
            logging.INFO,
            "candidate_skipped",
            session_id=session_id,
            replaced=replacement is not None,
        )
        return self._deck_response(session)

    @instrument_tool("prompt_stylist.lock")
    async def lock(self, session_id: str, kind: LayerKind | str, item_id: str) -> Dict[str, Any]:
        """Pin ``item_id`` to ``kind`` and regenerate the deck around it."""

        session = self.deck_store.get_session(session_id)
        layer = kind if isinstance(kind, LayerKind) else parse_layer_kind(kind)
        item = await asyncio.to_thread(self.wardrobe_store.get_item, session.user_id, item_id)
        if item is None:
            raise DeckSessionError(f"Unknown item_id {item_id}")
        if not layer_classifier.matches(item, layer):
            raise DeckSessionError(f"Item {item_id} is not a {layer.value} item")
        session.locked[layer] = item
        session.candidates = await self._fill_deck(session, max(len(session.candidates), self.deck_size))
        log_event(logger, logging.INFO, "layer_locked", session_id=session_id, kind=layer.value)
        return self._deck_response(session)

    @instrument_tool("prompt_stylist.unlock")
    async def unlock(self, session_id: str, kind: LayerKind | str) -> Dict[str, Any]:
        session = self.deck_store.get_session(session_id)
        layer = kind if isinstance(kind, LayerKind) else parse_layer_kind(kind)
        session.locked.pop(layer, None)
        return self._deck_response(session)

    def get_session(self, session_id: str) -> Dict[str, Any]:
        return self._deck_response(self.deck_store.get_session(session_id))

    @instrument_tool("prompt_stylist.save")
    def save(
        self,
        session_id: str,
        candidate_id: str,
        name: Optional[str] = None,
        description: str = "",
        occasion: Optional[str] = None,
        target_date: Optional[date] = None,
        is_favorite: bool = False,
    ) -> Dict[str, Any]:
        """Persist a complete candidate. Store failures come back as an error result."""

        session = self.deck_store.get_session(session_id)
        candidate = session.find_candidate(candidate_id)
        if not candidate.is_complete:
            return SaveResult(status="error", message=INCOMPLETE_OUTFIT_MESSAGE).model_dump()

        items = candidate.ordered_items
        image_urls = [item.image_url for item in items]
        record = OutfitRecord(
            outfit_id=uuid.uuid4().hex,
            user_id=session.user_id,
            name=(name or "").strip() or session.prompt[:MAX_NAME_LENGTH],
            item_ids=[item.item_id for item in items],
            image_urls=image_urls,
            description=description,
            occasion=(occasion or "").strip() or (session.query.occasion or ""),
            cover_image_url=image_urls[0] if image_urls else "",
            is_favorite=is_favorite,
            source="prompt",
            target_date=(
                datetime.combine(target_date, time.min, tzinfo=timezone.utc) if target_date else None
            ),
        )
        try:
            self.outfit_store.save_outfit(record)
        except OutfitStoreError as exc:
            log_event(logger, logging.ERROR, "outfit_save_failed", session_id=session_id, error=str(exc))
            return SaveResult(status="error", message=str(exc)).model_dump()
        log_event(logger, logging.INFO, "outfit_saved", session_id=session_id, outfit_id=record.outfit_id)
        return SaveResult(status="ok", outfit_id=record.outfit_id).model_dump()

    def start_deck_sync(self, user_id: str, prompt: str, count: Optional[int] = None) -> Dict[str, Any]:
        return asyncio.run(self.start_deck(user_id, prompt, count))


__all__ = ["PromptStylistAgent", "EMPTY_PROMPT_MESSAGE", "NO_MATCH_MESSAGE", "INCOMPLETE_OUTFIT_MESSAGE"]
