import re
from collections.abc import Sequence
from typing import Any

import numpy as np
import psycopg
from psycopg.rows import dict_row

from legaldocs.database.connection import get_connection
from legaldocs.database.models import ChunkMatch, IndexMatch, SearchIndexEntry

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)

# 32 divides the rank by itself + 1, scaling every score into [0, 1).
_RANK_NORMALIZATION = 32

_DOCUMENT_COLUMNS = """
    e.document_id, d.owner_id, d.filename, d.document_type, d.created_at
"""


def build_prefix_query(query: str) -> str:
    """Turn free text into an OR of prefix terms for ``to_tsquery``.

    ``"lease agr"`` becomes ``"lease:* | agr:*"`` so a document matching any
    term (or any word starting with it) is a candidate.
    """
    tokens = _TOKEN_RE.findall(query.lower())
    return " | ".join(f"{token}:*" for token in dict.fromkeys(tokens))


def _to_match(row: dict[str, Any]) -> IndexMatch:
    return IndexMatch(
        document_id=str(row["document_id"]),
        owner_id=row["owner_id"],
        filename=row["filename"],
        document_type=row["document_type"],
        created_at=row["created_at"],
        score=float(row["score"]),
        snippet=row["snippet"],
    )


def write_entries(
    conn: psycopg.Connection[Any],
    document_id: str,
    entries: Sequence[SearchIndexEntry],
) -> None:
    """Replace a document's index entries on ``conn`` without committing.

    Callers commit together with the document's completion so readers never
    see a partially indexed document.
    """
    with conn.cursor() as cur:
        cur.execute(
            "DELETE FROM search_index_entries WHERE document_id = %s::uuid",
            (document_id,),
        )
        if not entries:
            return
        cur.executemany(
            """
            INSERT INTO search_index_entries
            (document_id, chunk_index, owner_id, filename, document_type,
             chunk_text, char_start, char_end, embedding)
            VALUES (%s::uuid, %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            [
                (
                    entry.document_id,
                    entry.chunk_index,
                    entry.owner_id,
                    entry.filename,
                    entry.document_type,
                    entry.chunk_text,
                    entry.char_start,
                    entry.char_end,
                    np.asarray(entry.embedding, dtype=np.float32),
                )
                for entry in entries
            ],
        )


class SearchIndexRepository:
    """Read side of search_index_entries: lexical, vector and per-chunk lookups."""

    def delete_for_document(self, document_id: str) -> int:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM search_index_entries WHERE document_id = %s::uuid",
                    (document_id,),
                )
                deleted = cur.rowcount
            conn.commit()
        return deleted

    def lexical_search(self, query: str, owner_id: str, limit: int) -> list[IndexMatch]:
        """Full-text match on filename (weight A) and chunk text (weight B).

        Each document is scored by its best chunk.
        """
        ts_query = build_prefix_query(query)
        if not ts_query:
            return []
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_DOCUMENT_COLUMNS},
                           MAX(ts_rank_cd(e.search_vector, q, %(norm)s)) AS score,
                           (ARRAY_AGG(e.chunk_text
                                      ORDER BY ts_rank_cd(e.search_vector, q, %(norm)s) DESC))[1]
                               AS snippet
                    FROM search_index_entries e
                    JOIN documents d ON d.id = e.document_id,
                         to_tsquery('english', %(query)s) q
                    WHERE e.owner_id = %(owner_id)s
                      AND e.search_vector @@ q
                    GROUP BY {_DOCUMENT_COLUMNS}
                    ORDER BY score DESC, d.created_at DESC
                    LIMIT %(limit)s
                    """,
                    {
                        "norm": _RANK_NORMALIZATION,
                        "query": ts_query,
                        "owner_id": owner_id,
                        "limit": limit,
                    },
                )
                rows = cur.fetchall()
        return [_to_match(row) for row in rows]

    def semantic_search(
        self,
        embedding: Sequence[float],
        owner_id: str,
        threshold: float,
        limit: int,
        exclude_document_id: str | None = None,
    ) -> list[IndexMatch]:
        """Cosine similarity ``1 - (embedding <=> q)`` above ``threshold``, best chunk per document."""
        params: dict[str, Any] = {
            "q": np.asarray(embedding, dtype=np.float32),
            "owner_id": owner_id,
            "threshold": threshold,
            "limit": limit,
        }
        exclusion = ""
        if exclude_document_id:
            exclusion = "AND e.document_id <> %(exclude)s::uuid"
            params["exclude"] = exclude_document_id
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_DOCUMENT_COLUMNS},
                           MAX(1 - (e.embedding <=> %(q)s)) AS score,
                           (ARRAY_AGG(e.chunk_text ORDER BY e.embedding <=> %(q)s))[1]
                               AS snippet
                    FROM search_index_entries e
                    JOIN documents d ON d.id = e.document_id
                    WHERE e.owner_id = %(owner_id)s
                      AND 1 - (e.embedding <=> %(q)s) >= %(threshold)s
                      {exclusion}
                    GROUP BY {_DOCUMENT_COLUMNS}
                    ORDER BY score DESC, d.created_at DESC
                    LIMIT %(limit)s
                    """,
                    params,
                )
                rows = cur.fetchall()
        return [_to_match(row) for row in rows]

    def first_chunk_embedding(self, document_id: str, owner_id: str) -> list[float] | None:
        """Embedding of chunk 0, used as the document's representative vector."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT embedding
                    FROM search_index_entries
                    WHERE document_id = %s::uuid AND owner_id = %s AND chunk_index = 0
                    """,
                    (document_id, owner_id),
                )
                row = cur.fetchone()
        if row is None:
            return None
        return [float(value) for value in row[0]]

    def search_chunks(
        self,
        document_id: str,
        owner_id: str,
        embedding: Sequence[float],
        threshold: float,
        limit: int,
    ) -> list[ChunkMatch]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT chunk_index, chunk_text, char_start, char_end,
                           1 - (embedding <=> %(q)s) AS score
                    FROM search_index_entries
                    WHERE document_id = %(document_id)s::uuid
                      AND owner_id = %(owner_id)s
                      AND 1 - (embedding <=> %(q)s) >= %(threshold)s
                    ORDER BY score DESC, chunk_index
                    LIMIT %(limit)s
                    """,
                    {
                        "q": np.asarray(embedding, dtype=np.float32),
                        "document_id": document_id,
                        "owner_id": owner_id,
                        "threshold": threshold,
                        "limit": limit,
                    },
                )
                rows = cur.fetchall()
        return [
            ChunkMatch(
                chunk_index=row["chunk_index"],
                chunk_text=row["chunk_text"],
                char_start=row["char_start"],
                char_end=row["char_end"],
                score=float(row["score"]),
            )
            for row in rows
        ]
