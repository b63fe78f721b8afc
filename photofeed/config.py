"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── TiDB (MySQL-protocol compatible) ───────────────────────────────────
    tidb_host: str = "tidb"
    tidb_port: int = 4000
    tidb_user: str = "root"
    tidb_password: str = ""
    tidb_database: str = "photofeed"

    # Full SQLAlchemy URL; wins over the tidb_* parts when set
    # (e.g. sqlite+aiosqlite:///./photofeed.db for local runs).
    database_url: Optional[str] = None

    @property
    def tidb_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.tidb_user}:{self.tidb_password}"
            f"@{self.tidb_host}:{self.tidb_port}/{self.tidb_database}"
        )

    # ── Kafka ──────────────────────────────────────────────────────────────
    kafka_bootstrap_servers: str = "kafka:9092"
    kafka_topic_follow: str = "follow"
    kafka_topic_unfollow: str = "unfollow"
    kafka_topic_like: str = "like"
    kafka_topic_unlike: str = "unlike"
    kafka_topic_post: str = "post"
    # Upper bound on a single publish; a slower broker is logged, not fatal
    notify_timeout_seconds: float = 5.0

    # ── MinIO (S3-compatible) ──────────────────────────────────────────────
    minio_endpoint: str = "minio:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_bucket: str = "photofeed"
    minio_use_ssl: bool = False

    # ── Accounts / uploads ─────────────────────────────────────────────────
    bcrypt_rounds: int = 12
    max_upload_bytes: int = 10 << 20     # 10 MiB

    # ── Observability ──────────────────────────────────────────────────────
    otel_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    service_name: str = "photofeed-api"
    environment: str = "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
