from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage settings
    local_entry_store_path: str = "data/entries.json"
    local_relationship_store_path: str = "data/relationships.json"

    # LLM settings, all optional so the archive runs without any provider
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None
    voyage_ai_api_key: str | None = None
    embedder: Literal["voyage", "openai", "none"] = "voyage"
    summarizer_model: str = "claude-3-5-sonnet-20241022"
    embedding_max_tokens: int = 8000

    # Relationship settings
    relationship_threshold: float = 0.3
    relationship_embedding_weight: float = 0.0  # 0 keeps persisted scores lexical
    related_limit: int = 10
    suggestion_limit: int = 6
    detection_timeout_seconds: float = 30.0

    # Visualization settings
    canvas_width: int = 1200
    canvas_height: int = 800
    layout_max_iterations: int = 300

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
