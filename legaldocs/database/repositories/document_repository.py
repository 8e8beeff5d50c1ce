from collections.abc import Sequence
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from legaldocs.database.connection import get_connection
from legaldocs.database.models import SearchIndexEntry
from legaldocs.database.repositories.search_index_repository import write_entries
from legaldocs.documents.exceptions import DocumentNotFoundError, DocumentStateError
from legaldocs.documents.models import (
    Document,
    PipelineVariant,
    ProcessingStage,
    ProcessingStatus,
)

_COLUMNS = """
    id, owner_id, filename, content_type, file_size, storage_locator,
    document_type, pipeline_variant, is_public, processing_status,
    processing_stage, extracted_text, text_quality_score, analysis,
    embedding_count, failed_stage, error_code, error_message,
    created_at, updated_at, completed_at
"""


def _to_document(row: dict[str, Any]) -> Document:
    stage = row["processing_stage"]
    failed_stage = row["failed_stage"]
    return Document(
        id=str(row["id"]),
        owner_id=row["owner_id"],
        filename=row["filename"],
        content_type=row["content_type"],
        file_size=row["file_size"],
        storage_locator=row["storage_locator"],
        document_type=row["document_type"],
        pipeline_variant=PipelineVariant(row["pipeline_variant"]),
        is_public=row["is_public"],
        processing_status=ProcessingStatus(row["processing_status"]),
        processing_stage=ProcessingStage(stage) if stage else None,
        extracted_text=row["extracted_text"],
        text_quality_score=row["text_quality_score"],
        analysis=row["analysis"],
        embedding_count=row["embedding_count"],
        failed_stage=ProcessingStage(failed_stage) if failed_stage else None,
        error_code=row["error_code"],
        error_message=row["error_message"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        completed_at=row["completed_at"],
    )


class DocumentRepository:
    """Database operations for the documents table.

    Writes made on behalf of a running pipeline are all conditioned on
    ``processing_status = 'processing'``, so a document that has reached a
    terminal state can no longer be changed through this repository.
    """

    def create(self, document: Document) -> Document:
        """Insert a new pending document row and return it as stored."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO documents
                    (id, owner_id, filename, content_type, file_size, storage_locator,
                     document_type, pipeline_variant, is_public, processing_status)
                    VALUES (%s::uuid, %s, %s, %s, %s, %s, %s, %s, %s, 'pending')
                    RETURNING {_COLUMNS}
                    """,
                    (
                        document.id,
                        document.owner_id,
                        document.filename,
                        document.content_type,
                        document.file_size,
                        document.storage_locator,
                        document.document_type,
                        document.pipeline_variant.value,
                        document.is_public,
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise DocumentStateError(f"Document {document.id} was not created")
        return _to_document(row)

    def find_by_id(self, document_id: str) -> Document:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM documents WHERE id = %s::uuid",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return _to_document(row)

    def find_for_owner(self, document_id: str, owner_id: str) -> Document:
        """Find a document owned by ``owner_id``; other owners' documents look missing."""
        document = self.find_by_id(document_id)
        if document.owner_id != owner_id:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return document

    def claim_for_processing(self, document_id: str) -> Document | None:
        """Atomically move a pending document into the OCR stage.

        Returns the claimed document, or None when the document is already
        being processed or has reached a terminal state.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE documents
                    SET processing_status = 'processing',
                        processing_stage = 'ocr',
                        updated_at = NOW()
                    WHERE id = %s::uuid
                      AND processing_status = 'pending'
                    RETURNING {_COLUMNS}
                    """,
                    (document_id,),
                )
                row = cur.fetchone()
            conn.commit()
        return _to_document(row) if row is not None else None

    def set_stage(self, document_id: str, stage: ProcessingStage) -> None:
        self._update_processing(
            document_id,
            "processing_stage = %s",
            (stage.value,),
        )

    def save_ocr_result(self, document_id: str, text: str, quality_score: float) -> None:
        """Persist extracted text and its quality score."""
        self._update_processing(
            document_id,
            "extracted_text = %s, text_quality_score = %s",
            (text, quality_score),
        )

    def save_analysis(
        self,
        document_id: str,
        analysis: dict[str, Any],
        document_type: str | None = None,
    ) -> None:
        """Persist the analysis payload; ``document_type`` only fills an empty column."""
        self._update_processing(
            document_id,
            "analysis = %s, document_type = COALESCE(document_type, %s)",
            (Jsonb(analysis), document_type),
        )

    def mark_completed(
        self,
        document_id: str,
        index_entries: Sequence[SearchIndexEntry] = (),
    ) -> None:
        """Write the document's search index entries and complete it in one transaction.

        Either both land or neither does, so search never returns a document
        that is still processing or only partly indexed.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET processing_status = 'completed',
                        processing_stage = NULL,
                        embedding_count = %s,
                        completed_at = NOW(),
                        updated_at = NOW()
                    WHERE id = %s::uuid
                      AND processing_status = 'processing'
                    """,
                    (len(index_entries), document_id),
                )
                if cur.rowcount == 0:
                    conn.rollback()
                    raise DocumentStateError(
                        f"Document {document_id} is not processing; update rejected"
                    )
            write_entries(conn, document_id, index_entries)
            conn.commit()

    def mark_failed(
        self,
        document_id: str,
        stage: ProcessingStage,
        error_code: str,
        error_message: str,
    ) -> None:
        """Record the failing stage and reason, then move the document to failed.

        ``processing_stage`` is left pointing at the stage that failed.
        """
        self._update_processing(
            document_id,
            """
            processing_status = 'failed',
            processing_stage = %s,
            failed_stage = %s,
            error_code = %s,
            error_message = %s
            """,
            (stage.value, stage.value, error_code, error_message),
        )

    def delete(self, document_id: str) -> None:
        """Delete a document row; index entries and jobs cascade."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM documents WHERE id = %s::uuid", (document_id,))
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def _update_processing(
        self,
        document_id: str,
        assignments: str,
        params: tuple[Any, ...],
    ) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    UPDATE documents
                    SET {assignments}, updated_at = NOW()
                    WHERE id = %s::uuid
                      AND processing_status = 'processing'
                    """,
                    (*params, document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentStateError(
                        f"Document {document_id} is not processing; update rejected"
                    )
            conn.commit()
