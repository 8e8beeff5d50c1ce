from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "legaldocs"
    db_username: str = "legaldocs"
    db_password: str = "secret"
    db_pool_max_size: int = 10

    job_poll_interval_seconds: int = 5
    job_stale_after_seconds: int = 3600
    job_stale_sweep_interval_seconds: int = 60

    quota_check_timeout_seconds: float = 5.0
    quota_warning_percentage: float = 80.0

    blob_store_backend: Literal["local", "s3"] = "local"
    blob_store_root: str = "/app/files"
    s3_bucket: str = "legal-documents"
    s3_endpoint_url: str | None = None
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_region: str = "auto"

    pdf_engine: str = "pdfplumber"
    ocr_max_pages: int = 100
    tesseract_language: str = "eng"

    ai_provider: str = "openai"
    ai_temperature: float = 0.1
    ai_max_input_chars: int = 8000

    ai_openai_api_key: str = ""
    ai_openai_model_name: str = "gpt-4o-mini"
    ai_openai_timeout_seconds: int = 30

    ai_openai_compatible_api_key: str = ""
    ai_openai_compatible_model_name: str = ""
    ai_openai_compatible_base_url: str = ""
    ai_openai_compatible_timeout_seconds: int = 30

    ai_openrouter_api_key: str = ""
    ai_openrouter_model_name: str = ""
    ai_groq_api_key: str = ""
    ai_groq_model_name: str = ""
    ai_together_api_key: str = ""
    ai_together_model_name: str = ""
    ai_deepseek_api_key: str = ""
    ai_deepseek_model_name: str = ""
    ai_ollama_api_key: str = "ollama"
    ai_ollama_model_name: str = ""

    embedding_provider: str = "openai"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 1536
    embedding_timeout_seconds: int = 30
    embedding_chunk_size: int = 1000
    embedding_max_chunks: int = 200
    embedding_batch_size: int = 16

    stage_timeout_seconds: float = 120.0

    pipeline_upload_weight: float = 20.0
    pipeline_ocr_weight: float = 30.0
    pipeline_analysis_weight: float = 30.0
    pipeline_embedding_weight: float = 20.0

    broadcaster_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"

    search_similarity_threshold: float = 0.6
    search_max_results: int = 20

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_embedded_worker: bool = False
    api_stream_max_seconds: int = 800
