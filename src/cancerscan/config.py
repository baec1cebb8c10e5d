"""Configuration management for the CancerScan service."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    environment: str = Field("development", alias="CANCERSCAN_ENV")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8080, alias="PORT")
    model_url: str = Field("models/model.ts", alias="MODEL_URL")
    model_cache_dir: str = Field("models", alias="CANCERSCAN_MODEL_DIR")
    database_url: str = Field("sqlite:///predictions.db", alias="DATABASE_URL")
    cors_origins_raw: str = Field("*", alias="CORS_ORIGINS")
    preflight_origin: str = Field(
        "https://angular-stacker-446203-s0.et.r.appspot.com", alias="PREFLIGHT_ORIGIN"
    )
    max_payload_bytes: int = Field(1_000_000, alias="MAX_PAYLOAD_BYTES")
    inference_workers: int = Field(4, alias="INFERENCE_WORKERS")
    inference_timeout_seconds: float = Field(30.0, alias="INFERENCE_TIMEOUT_SECONDS")
    log_dir: str = Field("logs", alias="CANCERSCAN_LOG_DIR")
    log_level: str = Field("INFO", alias="CANCERSCAN_LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        populate_by_name = True
        extra = "ignore"
        protected_namespaces = ()

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins_raw.split(",") if origin]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


settings = get_settings()
