# src/textdeck/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    # App/Env
    APP_ENV: str = "development"
    APP_NAME: str = "textdeck"
    PORT: int = 3000
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Hosting platform aliases (either one set to "production" selects the direct transport)
    NODE_ENV: Optional[str] = None
    VERCEL_ENV: Optional[str] = None
    VERCEL_URL: Optional[str] = None

    # Vendor (GLM chat completions)
    GLM_API_KEY: Optional[str] = None
    GLM_MODEL: str = "glm-4.5"
    GLM_API_URL: str = "https://open.bigmodel.cn/api/paas/v4/chat/completions"

    # Intermediary used when the vendor cannot be reached directly
    PROXY_BASE_URL: Optional[str] = None

    # Limits (seconds / chars)
    PARSE_TIMEOUT_SEC: float = 55.0
    PROXY_TIMEOUT_SEC: float = 120.0
    MAX_TEXT_CHARS: int = 50000

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

settings = Settings()
