"""SQLite + FTS5 lexical store.

Segments are stored once in ``segments`` and their normalized text is indexed in
the external-content FTS5 table ``segments_fts``. Term search expands each word
with the Hebrew inseparable prefixes (ו ב כ ל מ ה) and matches them as prefix
terms.
"""
from __future__ import annotations

import logging
import os
import sqlite3
from typing import Any, Dict, Iterable, List, Optional, Tuple

from kol_hatorah.storage.schemas import ScopeFilter, Segment, SegmentRow, WorkCount, WorkRow
from kol_hatorah.text import expand_hebrew_prefixes, normalize_text

logger = logging.getLogger(__name__)

SEGMENT_COLUMNS = "id, type, work, ref, normalized_ref, lang, source, text_plain"


class StorageError(RuntimeError):
    pass


SCHEMA_SQL = [
    """
    CREATE TABLE IF NOT EXISTS segments (
      id TEXT PRIMARY KEY,
      type TEXT,
      work TEXT,
      ref TEXT,
      normalized_ref TEXT,
      lang TEXT,
      source TEXT,
      text_plain TEXT,
      text_norm TEXT
    );
    """,
    """
    CREATE VIRTUAL TABLE IF NOT EXISTS segments_fts USING fts5(
      text_norm,
      content='segments',
      content_rowid='rowid'
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_segments_type_work ON segments(type, work);",
    "CREATE INDEX IF NOT EXISTS idx_segments_work_ref ON segments(work, ref);",
    "CREATE INDEX IF NOT EXISTS idx_segments_normref ON segments(normalized_ref);",
]


def build_scope_where(scope: Optional[ScopeFilter], table: str = "") -> Tuple[str, Dict[str, Any]]:
    """Translate a ScopeFilter into an AND-joined WHERE fragment and its parameters."""
    col = f"{table}." if table else ""
    clauses: List[str] = []
    params: Dict[str, Any] = {}
    if scope is None:
        return "", params
    if scope.type:
        clauses.append(f"{col}type = :type")
        params["type"] = scope.type
    if scope.work:
        clauses.append(f"{col}work = :work")
        params["work"] = scope.work
    if scope.work_in:
        placeholders = []
        for idx, work in enumerate(scope.work_in):
            placeholders.append(f":work_in{idx}")
            params[f"work_in{idx}"] = work
        clauses.append(f"{col}work IN ({', '.join(placeholders)})")
    if scope.normalized_ref_prefix:
        clauses.append(f"{col}normalized_ref LIKE :ref_prefix || '%'")
        params["ref_prefix"] = scope.normalized_ref_prefix
    return " AND ".join(clauses), params


def _quote(token: str) -> str:
    return '"' + token.replace('"', '""') + '"'


def term_match_expression(term_norm: str) -> str:
    """FTS5 expression matching every word of ``term_norm`` with any Hebrew prefix.

    A single word gives ``"אור"* OR "ואור"* OR ...``; several words are each
    expanded that way and joined with AND. An empty term gives an empty string.
    """
    groups = []
    for word in term_norm.split():
        variants = " OR ".join(f"{_quote(v)}*" for v in expand_hebrew_prefixes(word))
        groups.append(f"({variants})")
    return " AND ".join(groups)


def all_terms_expression(tokens: Iterable[str]) -> str:
    """FTS5 expression requiring every token, each as a prefix term."""
    return " AND ".join(f"{_quote(t)}*" for t in tokens)


class SQLiteLexicalStore:
    """Lexical store over a single SQLite database file (or ``:memory:``)."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        try:
            if db_path != ":memory:":
                os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
            self.conn = sqlite3.connect(db_path)
            self.conn.row_factory = sqlite3.Row
            self._ensure_schema()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot open lexical store at {db_path}: {e}") from e

    def _ensure_schema(self) -> None:
        if self.db_path != ":memory:":
            self.conn.execute("PRAGMA journal_mode = WAL;")
        for stmt in SCHEMA_SQL:
            self.conn.execute(stmt)
        self.conn.commit()

    def _query(self, sql: str, params: Dict[str, Any]) -> List[sqlite3.Row]:
        try:
            return self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Lexical store query failed: {e}") from e

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "SQLiteLexicalStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # Writes

    def insert_segments(self, segments: Iterable[Segment]) -> int:
        """Insert or replace segments, keeping the FTS index in step. Returns the count."""
        written = 0
        try:
            with self.conn:
                for seg in segments:
                    norm = normalize_text(seg.text)
                    old = self.conn.execute(
                        "SELECT rowid, text_norm FROM segments WHERE id = ?", (seg.id,)
                    ).fetchone()
                    if old is not None:
                        self.conn.execute(
                            "INSERT INTO segments_fts(segments_fts, rowid, text_norm) VALUES ('delete', ?, ?)",
                            (old["rowid"], old["text_norm"]),
                        )
                        self.conn.execute("DELETE FROM segments WHERE id = ?", (seg.id,))
                    cur = self.conn.execute(
                        """
                        INSERT INTO segments (id, type, work, ref, normalized_ref, lang, source, text_plain, text_norm)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (seg.id, seg.type, seg.work, seg.ref, seg.normalized_ref, seg.lang, seg.source, norm.plain, norm.norm),
                    )
                    self.conn.execute(
                        "INSERT INTO segments_fts(rowid, text_norm) VALUES (?, ?)", (cur.lastrowid, norm.norm)
                    )
                    written += 1
        except sqlite3.Error as e:
            raise StorageError(f"Failed to insert segments: {e}") from e
        logger.info(f"Inserted {written} segments into {self.db_path}")
        return written

    # Reads

    @staticmethod
    def _rows(rows: List[sqlite3.Row]) -> List[SegmentRow]:
        return [SegmentRow(**dict(r)) for r in rows]

    def find_term(self, term_norm: str, scope: Optional[ScopeFilter] = None, limit: int = 50, offset: int = 0) -> List[SegmentRow]:
        match = term_match_expression(term_norm)
        if not match:
            return []
        clause, params = build_scope_where(scope)
        and_clause = f"AND {clause}" if clause else ""
        rows = self._query(
            f"""
            SELECT {SEGMENT_COLUMNS}
            FROM segments
            WHERE rowid IN (SELECT rowid FROM segments_fts WHERE segments_fts MATCH :match)
            {and_clause}
            ORDER BY rowid
            LIMIT :limit OFFSET :offset
            """,
            {"match": match, "limit": limit, "offset": offset, **params},
        )
        return self._rows(rows)

    def count_term(self, term_norm: str, scope: Optional[ScopeFilter] = None) -> int:
        match = term_match_expression(term_norm)
        if not match:
            return 0
        clause, params = build_scope_where(scope)
        and_clause = f"AND {clause}" if clause else ""
        rows = self._query(
            f"""
            SELECT COUNT(*) AS cnt
            FROM segments
            WHERE rowid IN (SELECT rowid FROM segments_fts WHERE segments_fts MATCH :match)
            {and_clause}
            """,
            {"match": match, **params},
        )
        return int(rows[0]["cnt"]) if rows else 0

    def get_by_prefix(self, ref_prefix: str, scope: Optional[ScopeFilter] = None, limit: int = 500) -> List[SegmentRow]:
        """Segments whose normalized reference starts with ``ref_prefix``, in corpus order."""
        if not ref_prefix:
            return []
        merged = (scope or ScopeFilter()).model_copy(update={"normalized_ref_prefix": ref_prefix})
        clause, params = build_scope_where(merged)
        rows = self._query(
            f"""
            SELECT {SEGMENT_COLUMNS}
            FROM segments
            WHERE {clause}
            ORDER BY rowid
            LIMIT :limit
            """,
            {"limit": limit, **params},
        )
        return self._rows(rows)

    def get_ref(self, normalized_ref: str) -> Optional[SegmentRow]:
        rows = self._query(
            f"SELECT {SEGMENT_COLUMNS} FROM segments WHERE normalized_ref = :ref LIMIT 1",
            {"ref": normalized_ref},
        )
        return SegmentRow(**dict(rows[0])) if rows else None

    def find_term_by_work(self, term_norm: str, scope: Optional[ScopeFilter] = None, limit: int = 100) -> List[WorkCount]:
        match = term_match_expression(term_norm)
        if not match:
            return []
        clause, params = build_scope_where(scope)
        and_clause = f"AND {clause}" if clause else ""
        rows = self._query(
            f"""
            SELECT work, COUNT(*) AS cnt
            FROM segments
            WHERE rowid IN (SELECT rowid FROM segments_fts WHERE segments_fts MATCH :match)
            {and_clause}
            GROUP BY work
            ORDER BY cnt DESC, MIN(rowid)
            LIMIT :limit
            """,
            {"match": match, "limit": limit, **params},
        )
        return [WorkCount(work=r["work"], count=int(r["cnt"])) for r in rows]

    def search_by_match(self, match_expression: str, scope: Optional[ScopeFilter] = None, top_k: int = 5) -> List[SegmentRow]:
        """Run a raw FTS5 expression, best-ranked first."""
        if not match_expression:
            return []
        clause, params = build_scope_where(scope, table="s")
        and_clause = f"AND {clause}" if clause else ""
        cols = ", ".join(f"s.{c.strip()}" for c in SEGMENT_COLUMNS.split(","))
        rows = self._query(
            f"""
            SELECT {cols}
            FROM segments_fts
            JOIN segments s ON s.rowid = segments_fts.rowid
            WHERE segments_fts MATCH :match
            {and_clause}
            ORDER BY segments_fts.rank
            LIMIT :limit
            """,
            {"match": match_expression, "limit": top_k, **params},
        )
        return self._rows(rows)

    def get_segments(self, scope: Optional[ScopeFilter] = None, limit: int = 100, offset: int = 0) -> List[SegmentRow]:
        clause, params = build_scope_where(scope)
        where = f"WHERE {clause}" if clause else ""
        rows = self._query(
            f"""
            SELECT {SEGMENT_COLUMNS}
            FROM segments
            {where}
            ORDER BY rowid
            LIMIT :limit OFFSET :offset
            """,
            {"limit": limit, "offset": offset, **params},
        )
        return self._rows(rows)

    def count_segments(self, scope: Optional[ScopeFilter] = None) -> int:
        clause, params = build_scope_where(scope)
        where = f"WHERE {clause}" if clause else ""
        rows = self._query(f"SELECT COUNT(*) AS cnt FROM segments {where}", params)
        return int(rows[0]["cnt"]) if rows else 0

    def list_works(self) -> List[WorkRow]:
        rows = self._query(
            """
            SELECT type, work, COUNT(*) AS cnt
            FROM segments
            GROUP BY type, work
            ORDER BY MIN(rowid)
            """,
            {},
        )
        return [WorkRow(type=r["type"], work=r["work"], count=int(r["cnt"])) for r in rows]


def open_store(db_path: str) -> SQLiteLexicalStore:
    return SQLiteLexicalStore(db_path)
