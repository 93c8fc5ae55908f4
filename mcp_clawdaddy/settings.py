from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_BASE_URL = "https://clawdaddy.app"
DEFAULT_USER_AGENT = "ClawDaddy-MCP/1.0"


class Settings(BaseSettings):
    app_name: str = Field("mcp-clawdaddy", alias="CLAWDADDY_APP_NAME")
    base_url: str = Field(DEFAULT_BASE_URL, alias="CLAWDADDY_BASE_URL")
    user_agent: str = Field(DEFAULT_USER_AGENT, alias="CLAWDADDY_USER_AGENT")
    transport: str = Field("stdio", alias="CLAWDADDY_TRANSPORT")
    host: str = Field("0.0.0.0", alias="CLAWDADDY_HOST")
    port: int = Field(8020, alias="CLAWDADDY_PORT")
    log_level: str = Field("INFO", alias="CLAWDADDY_LOG_LEVEL")
    allow_origins: Optional[str] = Field(None, alias="CLAWDADDY_ALLOW_ORIGINS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True

    def cors_origins(self) -> List[str]:
        if not self.allow_origins:
            return ["*"]
        return [origin.strip() for origin in self.allow_origins.split(",") if origin.strip()]

    def normalized_transport(self) -> str:
        value = (self.transport or "stdio").strip().lower()
        if value not in {"stdio", "http"}:
            raise ValueError(f"Unsupported transport '{self.transport}' (expected 'stdio' or 'http')")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
