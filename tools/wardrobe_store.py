"""Wardrobe storage abstractions with SQLite and in-memory implementations."""
from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional

from logic import layer_classifier
from models.taxonomy import LayerKind
from models.wardrobe_item import WardrobeItem

# Most recent rows inspected per layer fetch before classification.
SCAN_LIMIT = 1000


class WardrobeStore:
    """Persistence interface for wardrobe items."""

    def create_item(self, item: WardrobeItem) -> WardrobeItem:
        raise NotImplementedError

    def get_item(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        raise NotImplementedError

    def list_items_for_user(self, user_id: str, limit: Optional[int] = None) -> List[WardrobeItem]:
        """Return the user's items, most recently added first."""

        raise NotImplementedError

    def delete_item(self, user_id: str, item_id: str) -> bool:
        raise NotImplementedError

    def fetch_items(self, user_id: str, kind: LayerKind, limit: int) -> List[WardrobeItem]:
        """Return up to ``limit`` recent items classified as ``kind``."""

        recent = self.list_items_for_user(user_id, limit=SCAN_LIMIT)
        matching = [item for item in recent if layer_classifier.matches(item, kind)]
        return matching[: max(limit, 0)]


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store for wardrobe items."""

    def __init__(self, database_path: str | Path = "data/wardrobe.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS wardrobe_items (
                    user_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    image_url TEXT,
                    category TEXT,
                    sub_category TEXT,
                    style TEXT,
                    design_pattern TEXT,
                    material TEXT,
                    fit TEXT,
                    dress_code TEXT,
                    colors TEXT,
                    custom_tags TEXT,
                    mood_tags TEXT,
                    added_at TEXT,
                    PRIMARY KEY (user_id, item_id)
                );
                """
            )

    @staticmethod
    def _serialise_list(values: Optional[List[object]]) -> str:
        return json.dumps(values or [])

    @staticmethod
    def _deserialise_list(raw: str) -> List[object]:
        return json.loads(raw) if raw else []

    def create_item(self, item: WardrobeItem) -> WardrobeItem:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO wardrobe_items (
                    user_id, item_id, image_url, category, sub_category, style, design_pattern,
                    material, fit, dress_code, colors, custom_tags, mood_tags, added_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.user_id,
                    item.item_id,
                    item.image_url,
                    item.category,
                    item.sub_category,
                    item.style,
                    item.design_pattern,
                    item.material,
                    item.fit,
                    item.dress_code,
                    self._serialise_list(item.colors),
                    self._serialise_list(item.custom_tags),
                    self._serialise_list(item.mood_tags),
                    item.added_at.isoformat() if item.added_at else None,
                ),
            )
        return item

    def _row_to_item(self, row: sqlite3.Row) -> WardrobeItem:
        return WardrobeItem(
            item_id=row["item_id"],
            user_id=row["user_id"],
            image_url=row["image_url"],
            category=row["category"],
            sub_category=row["sub_category"],
            style=row["style"],
            design_pattern=row["design_pattern"],
            material=row["material"],
            fit=row["fit"],
            dress_code=row["dress_code"],
            colors=self._deserialise_list(row["colors"]),
            custom_tags=self._deserialise_list(row["custom_tags"]),
            mood_tags=self._deserialise_list(row["mood_tags"]),
            added_at=row["added_at"],
        )

    def get_item(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM wardrobe_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            row = cursor.fetchone()
            return self._row_to_item(row) if row else None

    def list_items_for_user(self, user_id: str, limit: Optional[int] = None) -> List[WardrobeItem]:
        query = "SELECT * FROM wardrobe_items WHERE user_id = ? ORDER BY added_at DESC, item_id"
        params: tuple = (user_id,)
        if limit is not None:
            query += " LIMIT ?"
            params = (user_id, int(limit))
        with self._connect() as conn:
            cursor = conn.execute(query, params)
            return [self._row_to_item(row) for row in cursor.fetchall()]

    def delete_item(self, user_id: str, item_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM wardrobe_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            return cursor.rowcount > 0


class InMemoryWardrobeStore(WardrobeStore):
    """Dictionary backed store used by tests, the CLI demo and evaluation runs."""

    def __init__(self) -> None:
        self._items: Dict[str, Dict[str, WardrobeItem]] = {}

    def create_item(self, item: WardrobeItem) -> WardrobeItem:
        self._items.setdefault(item.user_id, {})[item.item_id] = item
        return item

    def get_item(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        return self._items.get(user_id, {}).get(item_id)

    def list_items_for_user(self, user_id: str, limit: Optional[int] = None) -> List[WardrobeItem]:
        items = sorted(
            self._items.get(user_id, {}).values(),
            key=lambda item: (-item.added_at.timestamp(), item.item_id),
        )
        return items if limit is None else items[:limit]

    def delete_item(self, user_id: str, item_id: str) -> bool:
        return self._items.get(user_id, {}).pop(item_id, None) is not None


__all__ = ["WardrobeStore", "SQLiteWardrobeStore", "InMemoryWardrobeStore", "SCAN_LIMIT"]
