"""
Settings for the training program engine.

Read once from the environment (and .env) at import; everything else in
the app reads the `settings` instance.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

# Local frontends allowed when neither DEBUG nor CORS_ORIGINS is set
LOCAL_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # External program generation. No key means generate answers 503.
    ANTHROPIC_API_KEY: Optional[str] = Field(default=None)
    PROGRAM_GENERATION_MODEL: str = Field(default="claude-sonnet-4-6")
    PROGRAM_GENERATION_MAX_TOKENS: int = Field(default=4096, ge=256)
    # Hard cap on the single external attempt; past this we synthesize.
    PROGRAM_GENERATION_TIMEOUT_S: float = Field(default=30.0, gt=0)
    # Opt-in checks beyond the mandatory four (day count, goal, push/pull balance)
    PROGRAM_STRICT_VALIDATION: bool = Field(default=False)

    # Server
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    API_RELOAD: bool = Field(default=False)

    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")

    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # Comma-separated, e.g. "https://app.example.com,https://www.example.com"
    CORS_ORIGINS: Optional[str] = Field(default=None)

    @field_validator("LOG_FORMAT")
    @classmethod
    def _known_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return value

    @property
    def generation_configured(self) -> bool:
        return bool(self.ANTHROPIC_API_KEY)

    @property
    def cors_origin_list(self) -> List[str]:
        if self.DEBUG:
            return ["*"]
        if self.CORS_ORIGINS:
            return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        return list(LOCAL_ORIGINS)


settings = Settings()
