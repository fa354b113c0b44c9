import logging
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """애플리케이션 전체 설정. .env 파일 또는 환경변수에서 로드."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 캐시 저장소
    cache_dir: Path = Path("log_cache")
    retention_days: int = Field(default=10, ge=0)
    # When enabled, group directories get a short hash of the raw identifier so
    # "/svc/a" and "_svc_a" never share a directory.
    hash_group_dirs: bool = False

    # 원격 로그 API
    aws_region: str | None = None
    # Upper bound in seconds for draining one shard. None = no deadline.
    fetch_timeout: float | None = Field(default=None, gt=0)

    # 병렬 실행
    max_workers: int = Field(default=4, ge=1)

    # CLI → HTTP 서버
    server_url: str = Field(
        default="http://localhost:4010",
        validation_alias=AliasChoices("server_url", "mcp_server_url"),
    )

    # 로깅
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: Path = Path(".log")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        name = v.strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown log level: {v!r}")
        return name
