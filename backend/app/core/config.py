"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Application
    APP_NAME: str = "SupaSpend"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    # Database
    DATABASE_URL: str = "sqlite:///./supaspend.db"
    DB_ECHO: bool = False
    
    # JWT
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    
    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000"]
    
    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v
    
    # Exchange Rate (open access, no key required)
    FX_API_URL: str = "https://open.er-api.com/v6/latest"
    FX_TIMEOUT: float = 10.0
    
    # OpenAI (chat assistant)
    OPENAI_API_KEY: str = ""  # Set via .env file
    OPENAI_API_URL: str = "https://api.openai.com/v1/chat/completions"
    OPENAI_MODEL: str = "gpt-4o-mini"
    CHAT_MAX_TOKENS: int = 1000
    CHAT_TRANSACTION_LIMIT: int = 200  # Most recent transactions sent as context
    
    # Reports
    REPORT_PRODUCT_NAME: str = "SupaSpend"
    
    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
