from typing import Annotated

from fastapi import APIRouter, File, Form, Query, Response, UploadFile

from legaldocs.api.dependencies import Container, OwnerId
from legaldocs.api.schemas import (
    DocumentResponse,
    PassageResponse,
    SearchHitResponse,
    UploadResponse,
    UsageResponse,
)
from legaldocs.documents.models import PipelineVariant
from legaldocs.ingestion.models import UploadRequest

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", status_code=201, response_model=UploadResponse)
def upload_document(
    container: Container,
    owner_id: OwnerId,
    file: Annotated[UploadFile, File()],
    document_type: Annotated[str | None, Form()] = None,
    variant: Annotated[PipelineVariant, Form()] = PipelineVariant.FULL,
    is_public: Annotated[bool, Form()] = False,
) -> UploadResponse:
    """Admit a file for processing. Progress follows on ``/documents/{id}/events``."""
    data = file.file.read()
    receipt = container.ingestion.submit(
        UploadRequest(
            owner_id=owner_id,
            filename=file.filename or "upload",
            content_type=file.content_type or "application/octet-stream",
            data=data,
            document_type=document_type or None,
            variant=variant,
            is_public=is_public,
        )
    )
    return UploadResponse(
        document=DocumentResponse.from_document(receipt.document),
        usage=UsageResponse.from_usage(receipt.usage),
    )


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(document_id: str, container: Container, owner_id: OwnerId) -> DocumentResponse:
    return DocumentResponse.from_document(container.ingestion.get(owner_id, document_id))


@router.delete("/{document_id}", status_code=204)
def delete_document(document_id: str, container: Container, owner_id: OwnerId) -> Response:
    container.ingestion.delete(owner_id, document_id)
    return Response(status_code=204)


@router.get("/{document_id}/similar", response_model=list[SearchHitResponse])
def similar_documents(
    document_id: str,
    container: Container,
    owner_id: OwnerId,
    limit: Annotated[int, Query(ge=1, le=50)] = 5,
) -> list[SearchHitResponse]:
    container.ingestion.get(owner_id, document_id)
    hits = container.search.find_similar(document_id, owner_id, limit)
    return [SearchHitResponse.from_hit(hit) for hit in hits]


@router.get("/{document_id}/passages", response_model=list[PassageResponse])
def search_within_document(
    document_id: str,
    container: Container,
    owner_id: OwnerId,
    q: Annotated[str, Query(min_length=1)],
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
) -> list[PassageResponse]:
    container.ingestion.get(owner_id, document_id)
    matches = container.search.search_within(document_id, owner_id, q, limit)
    return [
        PassageResponse(
            chunk_index=match.chunk_index,
            text=match.chunk_text,
            char_start=match.char_start,
            char_end=match.char_end,
            score=match.score,
        )
        for match in matches
    ]
