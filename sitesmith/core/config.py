from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Sitesmith"
    API_PREFIX: str = "/api"

    # ===========================================
    # Environment Mode
    # ===========================================
    ENV: Literal["development", "production"] = "development"

    # Comma-separated list of allowed origins; empty means localhost dev origins
    CORS_ORIGINS: str = ""

    # ===========================================
    # LLM Provider Configuration
    # ===========================================
    # Provider: "openai" (OpenAI-compatible API) or "ollama"
    LLM_PROVIDER: Literal["openai", "ollama"] = "openai"

    LLM_API_BASE: str = "https://api.openai.com"
    LLM_API_KEY: Optional[str] = None
    LLM_MODEL: str = "gpt-4o"
    LLM_TIMEOUT: int = 120  # seconds

    # ===========================================
    # Website Generation
    # ===========================================
    GENERATION_MAX_TOKENS: int = 4000
    GENERATION_TEMPERATURE: float = 0.7

    # ===========================================
    # Message Storage
    # ===========================================
    # "memory" keeps messages in process; "database" uses DATABASE_URL
    MESSAGE_STORE: Literal["memory", "database"] = "memory"
    DATABASE_URL: str = "sqlite:///./data/messages.db"

    class Config:
        env_file = ".env"


settings = Settings()
