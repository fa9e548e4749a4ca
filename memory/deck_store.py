"""Session state for prompt decks: the candidates on screen and the locked layers."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from uuid import uuid4

from models.outfit import OutfitCandidate
from models.prompt_query import PromptQuery
from models.taxonomy import LayerKind
from models.wardrobe_item import WardrobeItem


class DeckSessionError(LookupError):
    """Raised for unknown session or candidate ids."""


@dataclass
class DeckSession:
    """Candidates currently shown for one prompt."""

    session_id: str
    user_id: str
    prompt: str
    query: PromptQuery
    candidates: List[OutfitCandidate] = field(default_factory=list)
    locked: Dict[LayerKind, WardrobeItem] = field(default_factory=dict)
    created_at: float = field(default_factory=lambda: time.time())

    def find_candidate(self, candidate_id: str) -> OutfitCandidate:
        for candidate in self.candidates:
            if candidate.candidate_id == candidate_id:
                return candidate
        raise DeckSessionError(f"Unknown candidate_id {candidate_id}")

    def replace_candidate(self, candidate_id: str, replacement: Optional[OutfitCandidate]) -> None:
        """Swap ``candidate_id`` for ``replacement`` in place, or drop it when ``None``."""

        candidate = self.find_candidate(candidate_id)
        index = self.candidates.index(candidate)
        if replacement is None:
            del self.candidates[index]
        else:
            self.candidates[index] = replacement


class DeckStore:
    """Interface for deck session persistence."""

    def create_session(self, user_id: str, prompt: str, query: PromptQuery) -> DeckSession:
        raise NotImplementedError

    def get_session(self, session_id: str) -> DeckSession:
        raise NotImplementedError

    def delete_session(self, session_id: str) -> bool:
        raise NotImplementedError


class InMemoryDeckStore(DeckStore):
    """Process local deck store; sessions expire after ``max_sessions`` newer ones."""

    def __init__(self, max_sessions: int = 500) -> None:
        self.max_sessions = max_sessions
        self._sessions: Dict[str, DeckSession] = {}
        self._lock = threading.Lock()

    def create_session(self, user_id: str, prompt: str, query: PromptQuery) -> DeckSession:
        session = DeckSession(session_id=str(uuid4()), user_id=user_id, prompt=prompt, query=query)
        with self._lock:
            self._sessions[session.session_id] = session
            while len(self._sessions) > self.max_sessions:
                oldest = min(self._sessions.values(), key=lambda s: s.created_at)
                del self._sessions[oldest.session_id]
        return session

    def get_session(self, session_id: str) -> DeckSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise DeckSessionError(f"Unknown session_id {session_id}")
        return session

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None


__all__ = ["DeckSession", "DeckStore", "InMemoryDeckStore", "DeckSessionError"]
