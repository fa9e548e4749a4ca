"""Persistence for saved outfits."""
from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from models.outfit import OutfitRecord


class OutfitStoreError(RuntimeError):
    """Raised when a saved outfit cannot be written or read."""


class OutfitStore:
    """Persistence interface for saved outfits."""

    def save_outfit(self, record: OutfitRecord) -> OutfitRecord:
        raise NotImplementedError

    def get_outfit(self, user_id: str, outfit_id: str) -> Optional[OutfitRecord]:
        raise NotImplementedError

    def list_outfits(self, user_id: str) -> List[OutfitRecord]:
        """Return saved outfits, newest first."""

        raise NotImplementedError


class SQLiteOutfitStore(OutfitStore):
    """Local SQLite-backed store for saved outfits."""

    def __init__(self, database_path: str | Path = "data/outfits.db") -> None:
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
                CREATE TABLE IF NOT EXISTS outfits (
                    user_id TEXT NOT NULL,
                    outfit_id TEXT NOT NULL,
                    name TEXT,
                    description TEXT,
                    occasion TEXT,
                    item_ids TEXT,
                    image_urls TEXT,
                    cover_image_url TEXT,
                    is_favorite INTEGER,
                    wear_count INTEGER,
                    source TEXT,
                    created_at TEXT,
                    target_date TEXT,
                    PRIMARY KEY (user_id, outfit_id)
                );
                """
            )

    def save_outfit(self, record: OutfitRecord) -> OutfitRecord:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO outfits (
                        user_id, outfit_id, name, description, occasion, item_ids, image_urls,
                        cover_image_url, is_favorite, wear_count, source, created_at, target_date
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.user_id,
                        record.outfit_id,
                        record.name,
                        record.description,
                        record.occasion,
                        json.dumps(record.item_ids),
                        json.dumps(record.image_urls),
                        record.cover_image_url,
                        int(record.is_favorite),
                        record.wear_count,
                        record.source,
                        record.created_at.isoformat(),
                        record.target_date.isoformat() if record.target_date else None,
                    ),
                )
        except sqlite3.Error as exc:
            raise OutfitStoreError(f"Could not save outfit {record.outfit_id}: {exc}") from exc
        return record

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> OutfitRecord:
        return OutfitRecord(
            outfit_id=row["outfit_id"],
            user_id=row["user_id"],
            name=row["name"],
            description=row["description"] or "",
            occasion=row["occasion"] or "",
            item_ids=json.loads(row["item_ids"] or "[]"),
            image_urls=json.loads(row["image_urls"] or "[]"),
            cover_image_url=row["cover_image_url"] or "",
            is_favorite=bool(row["is_favorite"]),
            wear_count=int(row["wear_count"] or 0),
            source=row["source"] or "prompt",
            created_at=datetime.fromisoformat(row["created_at"]),
            target_date=datetime.fromisoformat(row["target_date"]) if row["target_date"] else None,
        )

    def get_outfit(self, user_id: str, outfit_id: str) -> Optional[OutfitRecord]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM outfits WHERE user_id = ? AND outfit_id = ?",
                (user_id, outfit_id),
            )
            row = cursor.fetchone()
            return self._row_to_record(row) if row else None

    def list_outfits(self, user_id: str) -> List[OutfitRecord]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM outfits WHERE user_id = ? ORDER BY created_at DESC",
                (user_id,),
            )
            return [self._row_to_record(row) for row in cursor.fetchall()]


class InMemoryOutfitStore(OutfitStore):
    """Dictionary backed outfit store for tests and local runs."""

    def __init__(self) -> None:
        self._outfits: Dict[str, Dict[str, OutfitRecord]] = {}

    def save_outfit(self, record: OutfitRecord) -> OutfitRecord:
        self._outfits.setdefault(record.user_id, {})[record.outfit_id] = record
        return record

    def get_outfit(self, user_id: str, outfit_id: str) -> Optional[OutfitRecord]:
        return self._outfits.get(user_id, {}).get(outfit_id)

    def list_outfits(self, user_id: str) -> List[OutfitRecord]:
        return sorted(
            self._outfits.get(user_id, {}).values(),
            key=lambda record: record.created_at,
            reverse=True,
        )


__all__ = ["OutfitStore", "SQLiteOutfitStore", "InMemoryOutfitStore", "OutfitStoreError"]
