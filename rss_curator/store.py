"""
SQLite-backed document store.

Holds the drafts created by the publish workflow and the draft records that
bind each draft to the feed item link it was rewritten from. Document ids
are INTEGER PRIMARY KEY AUTOINCREMENT, so they grow monotonically and
the duplicate tracker can use the highest id as the most recent draft.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
import logging
from pathlib import Path
import sqlite3
import time
from typing import Iterator

from .core.errors import StorageError
from .core.types import Document, DraftRecord

logger = logging.getLogger(__name__)

STATUS_DRAFT = "draft"


class DocumentStore(ABC):
    """Document store collaborator used by the publish workflow."""

    @abstractmethod
    def create(self, title: str, body: str, status: str, author: str) -> int:
        """Create a document and return its id; raise StorageError on failure."""
        raise NotImplementedError

    @abstractmethod
    def get(self, document_id: int) -> Document | None:
        raise NotImplementedError

    @abstractmethod
    def edit_reference(self, document_id: int) -> str:
        raise NotImplementedError

    @abstractmethod
    def add_draft_record(self, document_id: int, link: str) -> DraftRecord:
        """Append a record binding ``document_id`` to ``link``; raise StorageError on failure."""
        raise NotImplementedError

    @abstractmethod
    def latest_document_for_link(self, link: str) -> int | None:
        """Highest document id recorded for exactly ``link``, or None."""
        raise NotImplementedError


class SQLiteDocumentStore(DocumentStore):
    """Documents and draft records in one SQLite database.

    A single connection is held for the lifetime of the store so that
    ``:memory:`` databases survive between calls.
    """

    def __init__(self, db_path: str = ":memory:", edit_url_template: str = "/drafts/{id}/edit"):
        self.db_path = db_path
        self.edit_url_template = edit_url_template
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(db_path, timeout=30.0)
        self._conn.row_factory = sqlite3.Row
        self.init_database()

    def init_database(self) -> None:
        with self.get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    body TEXT NOT NULL,
                    status TEXT NOT NULL,
                    author TEXT NOT NULL,
                    created_at REAL NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS draft_records (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    document_id INTEGER NOT NULL REFERENCES documents(id),
                    link TEXT NOT NULL,
                    created_at REAL NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_draft_records_link ON draft_records(link)"
            )

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Yield the connection inside a transaction (commit on success, rollback on error)."""
        with self._conn:
            yield self._conn

    def close(self) -> None:
        self._conn.close()

    def create(self, title: str, body: str, status: str, author: str) -> int:
        try:
            with self.get_connection() as conn:
                cursor = conn.execute(
                    "INSERT INTO documents (title, body, status, author, created_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (title, body, status, author, time.time()),
                )
                document_id = cursor.lastrowid
        except sqlite3.Error as exc:
            logger.error("SQLite error creating document: %s", exc)
            raise StorageError("insert failed") from exc
        if document_id is None:
            raise StorageError("insert failed")
        logger.info("Created %s document %s", status, document_id)
        return int(document_id)

    def get(self, document_id: int) -> Document | None:
        with self.get_connection() as conn:
            row = conn.execute(
                "SELECT id, title, body, status, author, created_at FROM documents WHERE id = ?",
                (document_id,),
            ).fetchone()
        if row is None:
            return None
        return Document(**dict(row))

    def edit_reference(self, document_id: int) -> str:
        return self.edit_url_template.format(id=document_id)

    def add_draft_record(self, document_id: int, link: str) -> DraftRecord:
        created_at = time.time()
        try:
            with self.get_connection() as conn:
                conn.execute(
                    "INSERT INTO draft_records (document_id, link, created_at) VALUES (?, ?, ?)",
                    (document_id, link, created_at),
                )
        except sqlite3.Error as exc:
            logger.error("SQLite error recording draft %s: %s", document_id, exc)
            raise StorageError("draft record insert failed") from exc
        return DraftRecord(document_id=document_id, link=link, created_at=created_at)

    def latest_document_for_link(self, link: str) -> int | None:
        try:
            with self.get_connection() as conn:
                row = conn.execute(
                    "SELECT MAX(document_id) AS document_id FROM draft_records WHERE link = ?",
                    (link,),
                ).fetchone()
        except sqlite3.Error as exc:
            logger.error("SQLite error looking up drafts: %s", exc)
            raise StorageError("draft lookup failed") from exc
        if row is None or row["document_id"] is None:
            return None
        return int(row["document_id"])

    def draft_records(self, link: str) -> list[DraftRecord]:
        with self.get_connection() as conn:
            rows = conn.execute(
                "SELECT document_id, link, created_at FROM draft_records "
                "WHERE link = ? ORDER BY document_id",
                (link,),
            ).fetchall()
        return [DraftRecord(**dict(row)) for row in rows]
