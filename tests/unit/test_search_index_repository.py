from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from legaldocs.database.repositories.search_index_repository import (
    SearchIndexRepository,
    build_prefix_query,
)

_PATCH_TARGET = "legaldocs.database.repositories.search_index_repository.get_connection"
CREATED = datetime(2026, 2, 1, tzinfo=timezone.utc)


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


def _match_row(document_id: str = "d1", score: float = 0.5) -> dict:
    return {
        "document_id": document_id,
        "owner_id": "o1",
        "filename": "lease.pdf",
        "document_type": "lease",
        "created_at": CREATED,
        "score": score,
        "snippet": "rent is due",
    }


class TestBuildPrefixQuery:
    def test_ors_prefix_terms(self) -> None:
        assert build_prefix_query("Lease agr") == "lease:* | agr:*"

    def test_drops_punctuation_and_duplicates(self) -> None:
        assert build_prefix_query("rent & rent!") == "rent:*"

    def test_empty_for_symbols_only(self) -> None:
        assert build_prefix_query("&&|") == ""


class TestLexicalSearch:
    @patch(_PATCH_TARGET)
    def test_skips_database_for_empty_query(self, mock_get_conn: MagicMock) -> None:
        assert SearchIndexRepository().lexical_search("!!", "o1", 10) == []
        mock_get_conn.assert_not_called()

    @patch(_PATCH_TARGET)
    def test_scopes_to_owner(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [_match_row()]

        results = SearchIndexRepository().lexical_search("rent", "o1", 10)

        sql, params = mock_cursor.execute.call_args.args
        assert "e.owner_id = %(owner_id)s" in sql
        assert params["owner_id"] == "o1"
        assert params["query"] == "rent:*"
        assert results[0].document_id == "d1"
        assert results[0].score == 0.5


class TestSemanticSearch:
    @patch(_PATCH_TARGET)
    def test_binds_exclusion_only_when_given(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = []

        SearchIndexRepository().semantic_search([0.1, 0.2], "o1", 0.6, 5)

        sql, params = mock_cursor.execute.call_args.args
        assert "exclude" not in params
        assert "%(exclude)s" not in sql

    @patch(_PATCH_TARGET)
    def test_excludes_document(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [_match_row("d2", 0.8)]

        results = SearchIndexRepository().semantic_search(
            [0.1, 0.2], "o1", 0.6, 5, exclude_document_id="d1"
        )

        _sql, params = mock_cursor.execute.call_args.args
        assert params["exclude"] == "d1"
        assert params["threshold"] == 0.6
        assert [r.document_id for r in results] == ["d2"]


class TestChunks:
    @patch(_PATCH_TARGET)
    def test_first_chunk_embedding_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert SearchIndexRepository().first_chunk_embedding("d1", "o1") is None

    @patch(_PATCH_TARGET)
    def test_first_chunk_embedding_as_floats(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = ([1, 0.5],)

        assert SearchIndexRepository().first_chunk_embedding("d1", "o1") == [1.0, 0.5]

    @patch(_PATCH_TARGET)
    def test_delete_for_document_commits(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 4

        assert SearchIndexRepository().delete_for_document("d1") == 4
        mock_conn.commit.assert_called_once()
