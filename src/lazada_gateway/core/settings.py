"""
Settings for the Lazada gateway.
"""

import os

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

LAZADA_API_URL = "https://api.lazada.vn/rest"
LAZADA_AUTH_URL = "https://auth.lazada.com/rest"
SIGN_METHOD = "sha256"

load_dotenv()


DEFAULT_DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./lazada_gateway.db")


class LazadaSettings(BaseSettings):
    """
    Settings for the Lazada Open API.

    ``api_url`` is the resource-API host used by every proxied call, while
    ``auth_url`` is only used for the authorization code exchange.
    """

    app_key: str = ""
    app_secret: str = ""
    api_url: str = LAZADA_API_URL
    auth_url: str = LAZADA_AUTH_URL
    database_url: str = DEFAULT_DATABASE_URL
    request_timeout: float | None = None
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", "8080"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LAZADA_",
        extra="ignore",
    )
