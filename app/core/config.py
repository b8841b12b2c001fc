"""
Application configuration.
All settings are loaded from environment variables (or .env).
"""
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Model API keys have empty defaults: endpoints that need them answer
    with a configuration error instead of calling the model.
    """

    # ===========================================
    # APPLICATION
    # ===========================================
    app_env: str = "local"
    # CORS: comma-separated origins
    cors_origins: str = "https://wizard-interactive-v2.vercel.app"

    # ===========================================
    # KEY-VALUE STORE (Redis / hosted KV)
    # ===========================================
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("redis_url", "kv_url"),
    )

    # ===========================================
    # MODEL PROVIDER SELECTION
    # ===========================================
    llm_provider: str = "anthropic"  # anthropic, openai
    llm_request_timeout: float = 120.0

    # ===========================================
    # ANTHROPIC (Provider: anthropic)
    # ===========================================
    claude_api_key: str = ""
    anthropic_api_url: str = "https://api.anthropic.com"
    anthropic_version: str = "2023-06-01"
    verification_model: str = "claude-opus-4-20250514"
    reading_model: str = "claude-opus-4-20250514"

    # ===========================================
    # OPENAI (Provider: openai)
    # ===========================================
    openai_api_key: str = ""
    openai_vision_model: str = "gpt-4o"
    openai_text_model: str = "gpt-4o"

    # ===========================================
    # PAYMENT VERIFICATION
    # ===========================================
    # strict, ewallet, fuzzy_name, recomputed (see app/verification/policy.py)
    verification_policy: str = "strict"
    verification_max_tokens: int = 1000
    payee_name: str = "Thomas Som Janisch"
    payee_account: str = "847-2-10962-7"
    payment_reference_ttl: int = 86400  # 24 hours

    # ===========================================
    # READINGS
    # ===========================================
    reading_max_tokens: int = 2000
    reading_temperature: float = 0.8

    # ===========================================
    # REVIEWS
    # ===========================================
    feedback_max_length: int = 1000

    # ===========================================
    # LOGGING
    # ===========================================
    log_level: str = "INFO"
    request_id_header: str = "X-Request-Id"
    log_file: str | None = None
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    @field_validator("llm_provider", "verification_policy")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
