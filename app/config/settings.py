from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    api_endpoint: str = "http://localhost:20002/graphql"
    api_key: str = ""
    api_timeout_seconds: float = 10.0

    redis_url: str = "redis://localhost:6379"
    redis_max_connections: int = 50
    redis_socket_timeout: int = 5

    idempotency_enabled: bool = False
    idempotency_ttl_seconds: int = 86400

    chart_max_points: int = 20
    list_page_size: int = 100
    observe_interval_seconds: float = 2.0

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
