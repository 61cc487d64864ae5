"""Wrappers around the ffprobe/ffmpeg executables."""
import json
import logging
import subprocess
from typing import List, Tuple

from tubely.config import settings
from tubely.core.metrics import MEDIA_TOOL_RUNS

logger = logging.getLogger("media")

ASPECT_LANDSCAPE = "16:9"
ASPECT_PORTRAIT = "9:16"
ASPECT_OTHER = "other"

_ORIENTATIONS = {
    ASPECT_LANDSCAPE: "landscape",
    ASPECT_PORTRAIT: "portrait",
}


class MediaToolError(RuntimeError):
    pass


def parse_media_type(content_type: str | None) -> str:
    """Base type of a Content-Type header, lower-cased, without parameters."""
    if not content_type:
        return ""
    base = content_type.split(";", 1)[0].strip().lower()
    kind, sep, sub = base.partition("/")
    if not sep or not kind or not sub or " " in base:
        return ""
    return base


def _run(tool: str, cmd: List[str]) -> subprocess.CompletedProcess:
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        MEDIA_TOOL_RUNS.labels(tool=tool, status="error").inc()
        raise MediaToolError(f"{tool} could not be started: {e}") from e

    if result.returncode != 0:
        MEDIA_TOOL_RUNS.labels(tool=tool, status="error").inc()
        logger.error("%s failed (rc=%s): %s", tool, result.returncode, (result.stderr or "")[:500])
        raise MediaToolError(f"{tool} exited with status {result.returncode}")

    MEDIA_TOOL_RUNS.labels(tool=tool, status="ok").inc()
    return result


def probe_dimensions(file_path: str) -> Tuple[int, int]:
    cmd = [
        settings.ffprobe_path,
        "-v", "error",
        "-print_format", "json",
        "-show_streams",
        file_path,
    ]
    result = _run("ffprobe", cmd)

    try:
        output = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise MediaToolError(f"ffprobe returned invalid json: {e}") from e

    streams = output.get("streams") or []
    if not streams:
        raise MediaToolError("ffprobe found no streams")

    # primeiro stream de vídeo; senão o primeiro que vier
    stream = next((s for s in streams if s.get("codec_type") == "video"), streams[0])
    width, height = stream.get("width") or 0, stream.get("height") or 0
    if width <= 0 or height <= 0:
        raise MediaToolError(f"invalid stream dimensions {width}x{height}")
    return int(width), int(height)


def classify_aspect_ratio(width: int, height: int) -> str:
    ratio = width / height
    if 1.7 < ratio < 1.9:
        return ASPECT_LANDSCAPE
    if 0.5 < ratio < 0.6:
        return ASPECT_PORTRAIT
    return ASPECT_OTHER


def orientation_for(aspect_ratio: str) -> str:
    return _ORIENTATIONS.get(aspect_ratio, "other")


def get_video_aspect_ratio(file_path: str) -> str:
    width, height = probe_dimensions(file_path)
    aspect = classify_aspect_ratio(width, height)
    logger.info("probed %sx%s -> %s", width, height, aspect)
    return aspect


def process_video_for_fast_start(file_path: str) -> str:
    """Re-mux with the moov atom first; returns the path of the sibling output file."""
    out_path = file_path + ".processing"
    cmd = [
        settings.ffmpeg_path,
        "-i", file_path,
        "-c", "copy",
        "-movflags", "faststart",
        "-f", "mp4",
        out_path,
    ]
    _run("ffmpeg", cmd)
    return out_path
