# tubely/routers/videos.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from ..domain.models.video import CreateVideoRequest, VideoRecord
from ..domain.repositories.video_repository_interface import IVideoRepository
from ..infrastructure.repositories.video_repo import VideoRepo
from ..services.storage import ThumbnailStore, build_thumbnail_store
from ..utils.s3 import sign_video
from ..config import settings

from tubely.auth import require_user
from tubely.core.errors import fail

import logging

router = APIRouter(prefix="/api/videos", tags=["videos"])

logger = logging.getLogger("videos")


def get_video_repo() -> IVideoRepository:
    return VideoRepo()


def get_thumbnail_store(request: Request) -> ThumbnailStore:
    store = getattr(request.app.state, "thumbnail_store", None)
    if store is None:
        store = build_thumbnail_store(settings)
        request.app.state.thumbnail_store = store
    return store


def parse_video_id(video_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(video_id)
    except ValueError as e:
        fail(status.HTTP_400_BAD_REQUEST, "Invalid ID", e)


def get_owned_video(repo: IVideoRepository, video_id: uuid.UUID, user_id: uuid.UUID) -> VideoRecord:
    try:
        video = repo.get(video_id)
    except Exception as e:
        fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Couldn't get video", e, video_id=str(video_id))
    if video is None:
        fail(status.HTTP_404_NOT_FOUND, "Video not found", video_id=str(video_id))
    if video.user_id != user_id:
        fail(status.HTTP_401_UNAUTHORIZED, "User doesn't have permission", video_id=str(video_id))
    return video


def signed(video: VideoRecord) -> VideoRecord:
    try:
        return sign_video(video)
    except Exception as e:
        fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Couldn't generate presigned URL", e, video_id=str(video.id))


@router.post("", response_model=VideoRecord, status_code=201)
def create_video(
    body: CreateVideoRequest,
    user_id: uuid.UUID = Depends(require_user),
    repo: IVideoRepository = Depends(get_video_repo),
) -> VideoRecord:
    video = VideoRecord(
        id=uuid.uuid4(),
        user_id=user_id,
        title=body.title.strip(),
        description=body.description.strip(),
    )
    try:
        repo.put(video)
    except Exception as e:
        fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Couldn't create video", e)
    logger.info("video criado", extra={"video_id": str(video.id)})
    return video


@router.get("", response_model=List[VideoRecord])
def list_videos(
    user_id: uuid.UUID = Depends(require_user),
    repo: IVideoRepository = Depends(get_video_repo),
) -> List[VideoRecord]:
    try:
        videos = repo.list_by_user(user_id)
    except Exception as e:
        fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Couldn't retrieve videos", e)
    return [signed(v) for v in videos]


@router.get("/{video_id}", response_model=VideoRecord)
def get_video(
    video_id: uuid.UUID = Depends(parse_video_id),
    user_id: uuid.UUID = Depends(require_user),
    repo: IVideoRepository = Depends(get_video_repo),
) -> VideoRecord:
    return signed(get_owned_video(repo, video_id, user_id))


@router.delete("/{video_id}", status_code=204)
def delete_video(
    video_id: uuid.UUID = Depends(parse_video_id),
    user_id: uuid.UUID = Depends(require_user),
    repo: IVideoRepository = Depends(get_video_repo),
    store: ThumbnailStore = Depends(get_thumbnail_store),
) -> Response:
    get_owned_video(repo, video_id, user_id)
    try:
        repo.delete(video_id)
    except Exception as e:
        fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Couldn't delete video", e, video_id=str(video_id))
    store.discard(video_id)
    return Response(status_code=204)
