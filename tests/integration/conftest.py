import os
import uuid
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from legaldocs.config.settings import Settings
from legaldocs.database.connection import close_pool, get_connection, init_pool
from legaldocs.database.repositories.document_repository import DocumentRepository
from legaldocs.documents.models import Document, PipelineVariant

_SCHEMA_PATH = Path(__file__).resolve().parents[2] / "legaldocs" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "legaldocs_test")
    return Settings()


def _apply_schema(settings: Settings) -> None:
    # The pool registers pgvector types on connect, so the extension must exist first.
    with psycopg.connect(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
        connect_timeout=5,
    ) as conn:
        conn.execute(_SCHEMA_PATH.read_text(encoding="utf-8"))
        conn.commit()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        _apply_schema(test_settings)
        init_pool(test_settings)
    except Exception as e:
        pytest.skip(
            f"PostgreSQL test DB with pgvector not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def owner_id(integration_pool: None) -> Generator[str, None, None]:
    """A fresh owner; everything written under it is removed afterwards."""
    owner = f"owner-{uuid.uuid4()}"
    yield owner
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM documents WHERE owner_id = %s", (owner,))
            cur.execute("DELETE FROM usage_records WHERE owner_id = %s", (owner,))
            cur.execute("DELETE FROM profiles WHERE id = %s", (owner,))
        conn.commit()


@pytest.fixture
def seed_profile(owner_id: str) -> Callable[[str], None]:
    def _seed(tier: str) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO profiles (id, subscription_tier) VALUES (%s, %s)
                ON CONFLICT (id) DO UPDATE SET subscription_tier = EXCLUDED.subscription_tier
                """,
                (owner_id, tier),
            )
            conn.commit()

    return _seed


@pytest.fixture
def seed_document(owner_id: str) -> Callable[..., Document]:
    """Factory that inserts pending documents for the test owner."""
    repo = DocumentRepository()

    def _seed(
        filename: str = "lease.txt",
        document_type: str | None = "lease",
        variant: PipelineVariant = PipelineVariant.FULL,
    ) -> Document:
        document_id = str(uuid.uuid4())
        return repo.create(
            Document(
                id=document_id,
                owner_id=owner_id,
                filename=filename,
                content_type="text/plain",
                file_size=10,
                storage_locator=f"{owner_id}/{document_id}/{filename}",
                document_type=document_type,
                pipeline_variant=variant,
            )
        )

    return _seed
