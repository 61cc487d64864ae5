# tubely/routers/uploads.py
import logging
import os
import shutil
import tempfile
import uuid

from fastapi import APIRouter, Depends, Request, status
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from ..config import settings
from ..domain.models.video import VideoRecord
from ..domain.repositories.video_repository_interface import IVideoRepository
from ..services import media
from ..services.storage import ThumbnailStore
from ..utils.s3 import build_s3_key, put_object, public_object_url, encode_video_url
from .videos import get_video_repo, get_thumbnail_store, parse_video_id, get_owned_video, signed

from tubely.auth import require_user
from tubely.core.errors import fail
from tubely.core.metrics import UPLOAD_BYTES, THUMBNAIL_BYTES

router = APIRouter(prefix="/api", tags=["uploads"])

logger = logging.getLogger("uploads")

ALLOWED_THUMBNAIL_TYPES = ("image/png", "image/jpeg")
VIDEO_MEDIA_TYPE = "video/mp4"

MB = 1 << 20


def video_body_limit(request: Request) -> None:
    """Recusa o corpo pelo Content-Length antes de qualquer parsing."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > settings.max_video_mb * MB:
        fail(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, f"Request body exceeds {settings.max_video_mb}MB")


def limit_body(request: Request, max_mb: int) -> Request:
    """
    Devolve um Request cujo receive conta os bytes recebidos e aborta com 413
    assim que passar de max_mb, mesmo sem Content-Length (chunked).
    """
    max_bytes = max_mb * MB
    received = 0

    async def receive():
        nonlocal received
        message = await request.receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            if received > max_bytes:
                fail(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, f"Request body exceeds {max_mb}MB")
        return message

    return Request(request.scope, receive=receive)


def _form_file(form, field: str, message: str) -> UploadFile:
    file = form.get(field)
    if not isinstance(file, UploadFile):
        fail(status.HTTP_400_BAD_REQUEST, message)
    return file


def _update_video(repo: IVideoRepository, video: VideoRecord, message: str) -> VideoRecord:
    try:
        return repo.update(video)
    except Exception as e:
        fail(status.HTTP_500_INTERNAL_SERVER_ERROR, message, e, video_id=str(video.id))


@router.post("/thumbnail_upload/{video_id}", response_model=VideoRecord)
async def upload_thumbnail(
    request: Request,
    video_id: uuid.UUID = Depends(parse_video_id),
    user_id: uuid.UUID = Depends(require_user),
    repo: IVideoRepository = Depends(get_video_repo),
    store: ThumbnailStore = Depends(get_thumbnail_store),
) -> VideoRecord:
    logger.info("uploading thumbnail", extra={"video_id": str(video_id)})

    async with limit_body(request, settings.max_thumbnail_mb).form(max_files=1) as form:
        file = _form_file(form, "thumbnail", "Unable to parse form file")

        media_type = media.parse_media_type(file.content_type)
        if media_type not in ALLOWED_THUMBNAIL_TYPES:
            fail(status.HTTP_400_BAD_REQUEST, "Unsupported media type: must be png or jpeg")

        video = get_owned_video(repo, video_id, user_id)

        try:
            data = await file.read()
        except OSError as e:
            fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Could not read image data", e)

    THUMBNAIL_BYTES.inc(len(data))

    try:
        thumbnail_url = await run_in_threadpool(store.save, video_id, data, media_type)
    except OSError as e:
        fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Couldn't save thumbnail", e, video_id=str(video_id))

    video = video.model_copy(update={"thumbnail_url": thumbnail_url})
    updated = _update_video(repo, video, "Couldn't update video")
    return signed(updated)


def _buffer_upload(file: UploadFile, path: str) -> int:
    file.file.seek(0)
    with open(path, "wb") as out:
        shutil.copyfileobj(file.file, out)
        return out.tell()


def _store_video(src_path: str, key: str, media_type: str) -> None:
    with open(src_path, "rb") as body:
        put_object(settings.s3_bucket, key, body, media_type)


@router.post(
    "/video_upload/{video_id}",
    response_model=VideoRecord,
    dependencies=[Depends(video_body_limit)],
)
async def upload_video(
    request: Request,
    video_id: uuid.UUID = Depends(parse_video_id),
    user_id: uuid.UUID = Depends(require_user),
    repo: IVideoRepository = Depends(get_video_repo),
) -> VideoRecord:
    # dono conferido antes de ler o corpo
    video = get_owned_video(repo, video_id, user_id)
    logger.info("uploading video", extra={"video_id": str(video_id)})

    async with limit_body(request, settings.max_video_mb).form(max_files=1) as form:
        file = _form_file(form, "video", "Unable to parse the video")

        media_type = media.parse_media_type(file.content_type)
        if media_type != VIDEO_MEDIA_TYPE:
            fail(status.HTTP_400_BAD_REQUEST, "Unsupported media type: must be video/mp4")

        # diretório temporário da requisição; some em qualquer saída
        with tempfile.TemporaryDirectory(prefix="tubely-") as tmp_dir:
            temp_path = os.path.join(tmp_dir, "tubely-upload.mp4")
            try:
                size = await run_in_threadpool(_buffer_upload, file, temp_path)
            except OSError as e:
                fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Couldn't buffer upload", e)
            UPLOAD_BYTES.inc(size)

            try:
                aspect = await run_in_threadpool(media.get_video_aspect_ratio, temp_path)
            except media.MediaToolError as e:
                fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Couldn't get video aspect ratio", e)

            upload_path = temp_path
            if settings.video_fast_start:
                try:
                    upload_path = await run_in_threadpool(media.process_video_for_fast_start, temp_path)
                except media.MediaToolError as e:
                    fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Couldn't process video", e)

            key = build_s3_key(media.orientation_for(aspect))
            try:
                await run_in_threadpool(_store_video, upload_path, key, media_type)
            except Exception as e:
                fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload to S3", e, key=key)

    logger.info("video enviado ao S3", extra={"video_id": str(video_id), "key": key, "size_bytes": size})

    if settings.video_url_mode == "public":
        video_url = public_object_url(settings.s3_bucket, settings.aws_region, key)
    else:
        video_url = encode_video_url(settings.s3_bucket, key)
    video = video.model_copy(update={"video_url": video_url})

    updated = _update_video(repo, video, "Couldn't update video url")
    return signed(updated)
