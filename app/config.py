"""
StoreCheck Configuration — pydantic-settings based.

All settings are read from environment variables or .env file.
Fails fast at startup if required values (GROQ_API_KEY) are missing.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Required ──
    groq_api_key: str = Field(..., description="Groq API key for the AI generation gateway")

    # ── LLM ──
    validation_model: str = Field(
        default="llama-3.1-8b-instant",
        description="Model used for per-file content validation",
    )
    augmentation_model: str = Field(
        default="llama-3.3-70b-versatile",
        description="Model used for per-issue augmentation (locations + fixes)",
    )
    llm_timeout: int = Field(default=30, description="LLM request timeout in seconds")
    llm_max_retries: int = Field(default=3, description="Max LLM retry attempts")
    llm_temperature: float = Field(default=0.2, description="LLM temperature")
    llm_max_tokens: int = Field(default=2048, description="Max completion tokens per call")

    # ── AI stages ──
    augmentation_timeout: float = Field(
        default=45.0,
        description="Upper bound (seconds) for one issue's augmentation, retries included",
    )
    augmentation_max_lines: int = Field(
        default=200, description="Lines of the attributed file sent for augmentation"
    )
    validation_max_chars: int = Field(
        default=3000, description="Characters of a file sent for content validation"
    )

    # ── File fetch ──
    github_api_url: str = Field(
        default="https://api.github.com", description="GitHub REST API base URL"
    )
    github_token: str = Field(default="", description="Optional GitHub token for private repos")
    github_timeout: float = Field(default=15.0, description="Per-file fetch timeout in seconds")

    # ── Persistence ──
    check_run_log_path: str = Field(
        default="check_runs.jsonl",
        description="Path to JSON-lines check-run event log",
    )

    # ── Server ──
    port: int = Field(default=5001, description="Server port")
    host: str = Field(default="0.0.0.0", description="Server bind host")
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance, imported by other modules
settings = Settings()
