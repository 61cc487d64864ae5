# tubely/utils/s3.py
import hashlib
from typing import BinaryIO, Optional, Union

from ..config import settings
from ..aws import s3
from ..domain.models.video import VideoRecord
from .id_gen import new_id
from tubely.core.metrics import S3_OPS


def build_s3_key(prefix: Optional[str] = None) -> str:
    name = f"{hashlib.md5(new_id().encode()).hexdigest()}.mp4"
    return f"{prefix}/{name}" if prefix else name


def put_object(bucket: str, key: str, body: Union[bytes, BinaryIO], content_type: str) -> None:
    """Envia o objeto ao S3 e incrementa métricas de sucesso/erro."""
    try:
        s3.put_object(Bucket=bucket, Key=key, Body=body, ContentType=content_type)
        S3_OPS.labels(op="put", status="ok").inc()
    except Exception:
        S3_OPS.labels(op="put", status="error").inc()
        raise


def generate_presigned_url(bucket: str, key: str, expires_in: int) -> str:
    try:
        url = s3.generate_presigned_url(
            "get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=expires_in,
        )
        S3_OPS.labels(op="sign", status="ok").inc()
        return url
    except Exception:
        S3_OPS.labels(op="sign", status="error").inc()
        raise


def public_object_url(bucket: str, region: str, key: str) -> str:
    return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"


def encode_video_url(bucket: str, key: str) -> str:
    return f"{bucket},{key}"


def sign_video(record: VideoRecord, expires_in: Optional[int] = None) -> VideoRecord:
    """
    Traduz a referência "bucket,key" gravada no registro para uma URL pré-assinada.
    Só se aplica no modo presigned; registros sem vídeo passam direto.
    """
    if settings.video_url_mode != "presigned" or not record.video_url:
        return record

    parts = record.video_url.split(",")
    if len(parts) != 2 or not all(parts):
        raise ValueError("invalid video url format")
    bucket, key = parts

    url = generate_presigned_url(bucket, key, expires_in or settings.presign_expiry_seconds)
    return record.model_copy(update={"video_url": url})
