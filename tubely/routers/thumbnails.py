# tubely/routers/thumbnails.py
import uuid

from fastapi import APIRouter, Depends, Response, status

from ..services.storage import ThumbnailStore
from .videos import get_thumbnail_store, parse_video_id

from tubely.core.errors import fail

router = APIRouter(prefix="/api/thumbnails", tags=["thumbnails"])


@router.get("/{video_id}")
def get_thumbnail(
    video_id: uuid.UUID = Depends(parse_video_id),
    store: ThumbnailStore = Depends(get_thumbnail_store),
) -> Response:
    # só o store em memória guarda bytes; os demais já gravam a URL final
    item = store.load(video_id)
    if item is None:
        fail(status.HTTP_404_NOT_FOUND, "Thumbnail not found", video_id=str(video_id))
    data, media_type = item
    return Response(content=data, media_type=media_type)
