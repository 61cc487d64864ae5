# tubely/services/storage.py
import base64
import logging
import os
import secrets
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple
from uuid import UUID

logger = logging.getLogger("storage")


class ThumbnailStore(ABC):
    """Persiste a imagem e devolve a URL que vai para o registro."""

    @abstractmethod
    def save(self, video_id: UUID, data: bytes, media_type: str) -> str:
        """Grava a imagem e devolve a URL de referência"""

    def load(self, video_id: UUID) -> Optional[Tuple[bytes, str]]:
        return None

    def discard(self, video_id: UUID) -> None:
        """Esquece a imagem do vídeo; no-op para stores que não guardam bytes"""


class DataURLThumbnailStore(ThumbnailStore):
    def save(self, video_id: UUID, data: bytes, media_type: str) -> str:
        encoded = base64.b64encode(data).decode("ascii")
        return f"data:{media_type};base64,{encoded}"


class AssetsThumbnailStore(ThumbnailStore):
    def __init__(self, assets_root: str, base_url: str):
        self._root = assets_root
        self._base_url = base_url.rstrip("/")

    def save(self, video_id: UUID, data: bytes, media_type: str) -> str:
        ext = media_type.split("/", 1)[-1]
        filename = f"{secrets.token_urlsafe(32)}.{ext}"
        os.makedirs(self._root, exist_ok=True)
        path = os.path.join(self._root, filename)
        with open(path, "wb") as fh:
            fh.write(data)
        logger.info("thumbnail salvo em %s", path, extra={"video_id": str(video_id)})
        return f"{self._base_url}/assets/{filename}"


class MemoryThumbnailStore(ThumbnailStore):
    # uma instância por app (app.state), nunca global de módulo
    def __init__(self, base_url: str):
        self._base_url = base_url.rstrip("/")
        self._items: Dict[UUID, Tuple[bytes, str]] = {}

    def save(self, video_id: UUID, data: bytes, media_type: str) -> str:
        self._items[video_id] = (data, media_type)
        return f"{self._base_url}/api/thumbnails/{video_id}"

    def load(self, video_id: UUID) -> Optional[Tuple[bytes, str]]:
        return self._items.get(video_id)

    def discard(self, video_id: UUID) -> None:
        self._items.pop(video_id, None)


def build_thumbnail_store(settings) -> ThumbnailStore:
    policy = settings.thumbnail_storage
    if policy == "data_url":
        return DataURLThumbnailStore()
    if policy == "assets":
        return AssetsThumbnailStore(settings.assets_root, settings.base_url)
    if policy == "memory":
        return MemoryThumbnailStore(settings.base_url)
    raise ValueError(f"unknown thumbnail storage policy: {policy!r}")
