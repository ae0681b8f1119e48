from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import List

from .models import ImageFormat, ScreenshotRecord, ScreenshotType
from .utils import ensure_directory


class ScreenshotRepository:
    """Append-only log of every screenshot written to disk."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        ensure_directory(db_path.parent)
        self._initialize()

    def _initialize(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS screenshots (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    captured_at TEXT NOT NULL,
                    image_path TEXT NOT NULL,
                    view_id TEXT NOT NULL,
                    screenshot_type INTEGER NOT NULL,
                    component INTEGER NOT NULL,
                    format TEXT NOT NULL,
                    window_title TEXT,
                    process_name TEXT,
                    label TEXT,
                    hash_digest TEXT
                )
                """
            )
            conn.commit()

    def add_screenshot(self, record: ScreenshotRecord) -> int:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                INSERT INTO screenshots (
                    captured_at, image_path, view_id, screenshot_type, component, format,
                    window_title, process_name, label, hash_digest
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.captured_at.isoformat(),
                    str(record.image_path),
                    str(record.view_id),
                    int(record.screenshot_type),
                    record.component,
                    record.format.value,
                    record.window_title,
                    record.process_name,
                    record.label,
                    record.hash_digest,
                ),
            )
            conn.commit()
            record.id = int(cursor.lastrowid)
            return record.id

    def recent(self, limit: int = 25) -> List[ScreenshotRecord]:
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT id, captured_at, image_path, view_id, screenshot_type, component, format,
                       window_title, process_name, label, hash_digest
                FROM screenshots
                ORDER BY id DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()

        records: List[ScreenshotRecord] = []
        for row in rows:
            records.append(
                ScreenshotRecord(
                    id=row[0],
                    captured_at=datetime.fromisoformat(row[1]),
                    image_path=Path(row[2]),
                    view_id=uuid.UUID(row[3]),
                    screenshot_type=ScreenshotType(row[4]),
                    component=row[5],
                    format=ImageFormat(row[6]),
                    window_title=row[7] or "",
                    process_name=row[8] or "",
                    label=row[9] or "",
                    hash_digest=row[10],
                )
            )
        return records

    def count(self) -> int:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT COUNT(*) FROM screenshots").fetchone()
        return int((row or [0])[0])
