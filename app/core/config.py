from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="study-buddy", alias="APP_NAME")
    version: str = Field(default="api", alias="API_VERSION")
    port: int = Field(default=5000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        alias="CORS_ORIGINS",
    )

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    # "memory" keeps everything in-process; "database" uses SQLAlchemy
    backend: str = Field(default="memory", alias="STORAGE_BACKEND")
    database_url: str = Field(
        default="sqlite+aiosqlite:///./study_buddy.db", alias="DATABASE_URL"
    )
    echo: bool = Field(default=False, alias="DATABASE_ECHO")


class SessionSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    ttl_seconds: int = Field(default=6 * 3600, alias="SESSION_TTL_SECONDS")
    sweep_interval_seconds: int = Field(
        default=300, alias="SESSION_SWEEP_INTERVAL_SECONDS"
    )
    strict_round_validation: bool = Field(
        default=True, alias="STRICT_ROUND_VALIDATION"
    )
    max_pdf_bytes: int = Field(default=10 * 1024 * 1024, alias="MAX_PDF_BYTES")


class GenerationSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    use_ai: bool = Field(default=True, alias="USE_AI_GENERATION")

    # Model provider selection: "google" or "openrouter"
    model_provider: str = Field(default="google", alias="MODEL_PROVIDER")
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.0-flash", alias="GEMINI_MODEL")
    openrouter_api_key: Optional[str] = Field(default=None, alias="OPENROUTER_API_KEY")
    openrouter_model: str = Field(
        default="openai/gpt-4o-mini", alias="OPENROUTER_MODEL"
    )

    timeout_seconds: float = Field(default=30.0, alias="GENERATION_TIMEOUT_SECONDS")
    attempts: int = Field(default=2, alias="GENERATION_ATTEMPTS")

    @computed_field
    def is_configured(self) -> bool:
        if not self.use_ai:
            return False
        if (self.model_provider or "google").lower() == "openrouter":
            return bool(self.openrouter_api_key)
        return bool(self.gemini_api_key)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    storage: StorageSettings = Field(default_factory=lambda: StorageSettings())
    session: SessionSettings = Field(default_factory=lambda: SessionSettings())
    generation: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings()
    )


settings = Settings()
