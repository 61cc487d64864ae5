# tubely/config.py
from typing import Literal, Optional
from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

class Settings(BaseSettings):

    os.environ.setdefault("S3_BUCKET", "tubely-videos")
    os.environ.setdefault("DDB_TABLE", "videos")

    # Defaults "normais" (sobrepostos por env/.env)
    base_url: str = "http://localhost:8091"
    aws_region: str = "us-east-1"
    aws_endpoint_url: Optional[str] = None
    s3_bucket: str = "tubely-videos"
    ddb_table: str = "videos"
    assets_root: str = "./assets"

    # data_url | assets | memory
    thumbnail_storage: Literal["data_url", "assets", "memory"] = "data_url"
    # presigned -> grava "bucket,key" e assina na leitura; public -> URL direta
    video_url_mode: Literal["presigned", "public"] = "presigned"
    presign_expiry_seconds: int = 15 * 60

    max_thumbnail_mb: int = 10
    max_video_mb: int = 1024
    video_fast_start: bool = True
    ffprobe_path: str = "ffprobe"
    ffmpeg_path: str = "ffmpeg"

    # obrigatório
    jwt_secret: str = Field(
        ...,
        validation_alias=AliasChoices("JWT_SECRET", "jwt_secret"),
    )

    # pydantic-settings v2
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",   # sem prefixo
        extra="ignore",
    )

settings = Settings()
