from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "simplymedi"
    db_username: str = "simplymedi"
    db_password: str = "secret"

    job_poll_interval_seconds: int = 5
    max_concurrent_jobs: int = 4

    storage_root: str = "./uploads"
    max_file_size_bytes: int = 10 * 1024 * 1024

    pdf_engine: str = "pdfplumber"
    ocr_confidence_threshold: float = 60.0
    ocr_max_dimension: int = 2000
    text_encoding: str = "utf-8"
    default_language: str = "english"

    gemini_api_key: str = ""
    gemini_model_name: str = "gemini-1.5-flash"
    perplexity_api_key: str = ""
    perplexity_model_name: str = "llama-3.1-sonar-small-128k-chat"
    openai_api_key: str = ""
    openai_model_name: str = "gpt-4o-mini"
    openrouter_api_key: str = ""
    openrouter_model_name: str = "openai/gpt-4o-mini"
    groq_api_key: str = ""
    groq_model_name: str = "llama-3.1-8b-instant"
    huggingface_api_key: str = ""
    huggingface_base_url: str = "https://api-inference.huggingface.co/models"
    huggingface_chat_model: str = "microsoft/DialoGPT-medium"
    huggingface_ner_model: str = "emilyalsentzer/Bio_ClinicalBERT"

    simplify_providers: list[str] = ["gemini", "huggingface"]
    entity_providers: list[str] = ["huggingface", "gemini"]
    risk_providers: list[str] = ["perplexity", "gemini"]
    recommend_providers: list[str] = ["gemini", "perplexity"]
    summarize_providers: list[str] = ["perplexity", "gemini"]
    chat_providers: list[str] = ["gemini", "huggingface", "perplexity"]

    document_capability_timeout_seconds: float = 60.0
    chat_timeout_seconds: float = 20.0
    retrieval_timeout_seconds: float = 45.0
    indexing_timeout_seconds: float = 30.0

    rag_chat_webhook_url: str = ""
    rag_document_webhook_url: str = ""
    indexing_queue_size: int = 100

    high_risk_keywords: list[str] = [
        "critical",
        "severe",
        "acute",
        "emergency",
        "abnormal",
        "high",
        "elevated",
    ]
    medium_risk_keywords: list[str] = [
        "moderate",
        "borderline",
        "slightly elevated",
        "mild",
    ]
