"""Record which documents already carry the classes of the current vocabulary.

A document is only up to date while both its bytes and the vocabulary rules
are unchanged; editing either one yields a new fingerprint and the document is
classified again.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

LOGGER = logging.getLogger(__name__)


def compute_fingerprint(document_bytes: bytes, vocabulary_digest: str) -> str:
    """Hash a document's content together with the digest of the rules applied to it."""

    payload = hashlib.sha256(document_bytes).hexdigest() + "\n" + vocabulary_digest
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class ClassifiedDocument:
    vocabulary: str
    document: str
    fingerprint: str
    classified_at: datetime
    labels: List[str] = field(default_factory=list)


class ProcessedStore:
    """SQLite table of the fingerprint each document had after its last classification."""

    def __init__(self, db_path: Path):
        self._db_path = db_path
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS classified_documents (
                    vocabulary TEXT NOT NULL,
                    document TEXT NOT NULL,
                    fingerprint TEXT NOT NULL,
                    labels TEXT NOT NULL,
                    classified_at TEXT NOT NULL,
                    PRIMARY KEY (vocabulary, document)
                )
                """
            )

    def fingerprint_of(self, vocabulary: str, document: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT fingerprint FROM classified_documents WHERE vocabulary=? AND document=?",
                (vocabulary, document),
            ).fetchone()
        return row[0] if row else None

    def is_current(self, vocabulary: str, document: str, fingerprint: str) -> bool:
        return self.fingerprint_of(vocabulary, document) == fingerprint

    def record(self, vocabulary: str, document: str, fingerprint: str, labels: Iterable[str] = ()) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO classified_documents(vocabulary, document, fingerprint, labels, classified_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (vocabulary, document, fingerprint, json.dumps(sorted(labels)), timestamp),
            )
        LOGGER.debug("Recorded %s for vocabulary %s (%s)", document, vocabulary, fingerprint[:12])

    def recent_entries(self, limit: int = 10) -> list[ClassifiedDocument]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT vocabulary, document, fingerprint, labels, classified_at FROM classified_documents "
                "ORDER BY classified_at DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [
            ClassifiedDocument(row[0], row[1], row[2], datetime.fromisoformat(row[4]), json.loads(row[3]))
            for row in rows
        ]
