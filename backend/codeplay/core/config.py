from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    APP_NAME: str = "CodePlay Execution Proxy"
    API_PREFIX: str = "/api"
    PORT: int = 3000

    # Sandbox (Piston-compatible execution engine)
    SANDBOX_URL: str = "http://piston:2000"
    SANDBOX_HTTP_TIMEOUT_S: float = 10.0
    SANDBOX_MAX_KEEPALIVE: int = 10
    SANDBOX_KEEPALIVE_EXPIRY_S: float = 30.0
    PROVISION_ON_STARTUP: bool = True

    # Per-run limits forwarded to the sandbox
    RUN_TIMEOUT_MS: int = 5000
    COMPILE_TIMEOUT_MS: int = 10000
    MEMORY_LIMIT: int = -1

    # Rate limiting
    RATE_LIMIT_MAX: int = 100
    RATE_LIMIT_WINDOW_S: int = 60
    RATE_LIMIT_BACKEND: str = "memory"
    RATE_LIMIT_PREFIX: str = "ratelimit:"
    REDIS_URL: str = "redis://localhost:6379/0"

    # Browser-side client
    BACKEND_URL: str = "http://localhost:3000/api/execute"
    PUBLIC_SANDBOX_URL: str = "https://emkc.org/api/v2/piston/execute"
    CLIENT_HTTP_TIMEOUT_S: float = 30.0

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
