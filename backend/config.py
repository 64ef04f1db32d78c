"""
Studio Feedback Desk - Configuration Management
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # FastAPI
    fastapi_env: str = "development"
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 8000

    # LLM
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.3
    openai_max_tokens: int = 500
    openai_chat_max_tokens: int = 1000
    openai_timeout_seconds: Optional[float] = None  # None keeps the client default

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: str = ""

    # Tickets
    chat_source_tag: str = "ai-chatbot"
    ticket_number_max_attempts: int = 3

    # Chat sessions
    chat_session_ttl_seconds: int = 3600

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )

    @property
    def supabase_api_key(self) -> str:
        """Service role key when available, otherwise the anon key"""
        return self.supabase_service_role_key or self.supabase_key


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
