from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from legaldocs.api.container import ServiceContainer
from legaldocs.api.routes import documents, events, search
from legaldocs.documents.exceptions import DocumentNotFoundError, DocumentStateError
from legaldocs.ingestion.exceptions import FileTooLargeError
from legaldocs.logging.logger import Log
from legaldocs.quota.exceptions import QuotaExceededError
from legaldocs.search.exceptions import SearchError
from legaldocs.storage.exceptions import StorageError


def _error(status_code: int, code: str, message: str, **extra: object) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": code, "message": message, **extra},
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(QuotaExceededError)
    async def quota_exceeded(request: Request, exc: QuotaExceededError) -> JSONResponse:
        usage = exc.usage
        return _error(
            402,
            "quota_exceeded",
            str(exc),
            limit=usage.limit,
            current=usage.current,
            tier=usage.tier,
        )

    @app.exception_handler(FileTooLargeError)
    async def file_too_large(request: Request, exc: FileTooLargeError) -> JSONResponse:
        return _error(413, "file_too_large", str(exc), max_file_size=exc.max_file_size)

    @app.exception_handler(DocumentNotFoundError)
    async def document_not_found(request: Request, exc: DocumentNotFoundError) -> JSONResponse:
        return _error(404, "not_found", str(exc))

    @app.exception_handler(DocumentStateError)
    async def document_state(request: Request, exc: DocumentStateError) -> JSONResponse:
        return _error(409, "conflict", str(exc))

    @app.exception_handler(StorageError)
    async def storage_unavailable(request: Request, exc: StorageError) -> JSONResponse:
        Log.error(f"Storage failure on {request.url.path}: {exc}")
        return _error(503, "storage_error", "Document storage is unavailable")

    @app.exception_handler(SearchError)
    async def search_unavailable(request: Request, exc: SearchError) -> JSONResponse:
        Log.warning(f"Search failure on {request.url.path}: {exc}")
        return _error(503, "search_unavailable", str(exc))


def create_app(container: ServiceContainer) -> FastAPI:
    """Build the HTTP application around an already-wired container."""
    app = FastAPI(title="Legal document pipeline")
    app.state.container = container
    _register_exception_handlers(app)
    app.include_router(documents.router)
    app.include_router(events.router)
    app.include_router(search.router)

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
