import os
import tempfile
import time
import uuid

import jwt
import pytest

# Settings é instanciado no import; ENV precisa existir antes
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("ASSETS_ROOT", tempfile.mkdtemp(prefix="tubely-assets-"))

from tubely.domain.models.video import VideoRecord
from tubely.domain.repositories.video_repository_interface import IVideoRepository

OWNER_ID = uuid.UUID("11111111-1111-4111-8111-111111111111")
OTHER_ID = uuid.UUID("22222222-2222-4222-8222-222222222222")


def make_token(user_id=OWNER_ID, secret="test-secret", issuer="tubely-access", expires_in=3600):
    now = int(time.time())
    payload = {"iss": issuer, "sub": str(user_id), "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(user_id=OWNER_ID):
    return {"Authorization": f"Bearer {make_token(user_id)}"}


# ========= Repositório fake =========
class FakeVideoRepo(IVideoRepository):
    def __init__(self, *records: VideoRecord):
        self.items = {r.id: r for r in records}
        self.calls = []
        self.fail_update = False

    def put(self, record):
        self.calls.append(("put", record.id))
        self.items[record.id] = record

    def get(self, video_id):
        self.calls.append(("get", video_id))
        return self.items.get(video_id)

    def update(self, record):
        self.calls.append(("update", record.id))
        if self.fail_update:
            raise RuntimeError("ddb down")
        self.items[record.id] = record
        return record

    def list_by_user(self, user_id):
        self.calls.append(("list", user_id))
        return [r for r in self.items.values() if r.user_id == user_id]

    def delete(self, video_id):
        self.calls.append(("delete", video_id))
        self.items.pop(video_id, None)


@pytest.fixture
def video():
    return VideoRecord(
        id=uuid.uuid4(),
        user_id=OWNER_ID,
        title="Boots",
        description="a bear",
    )


@pytest.fixture
def repo(video):
    return FakeVideoRepo(video)


@pytest.fixture
def app_client(repo):
    from fastapi.testclient import TestClient
    from tubely.main import app
    from tubely.routers import videos as videos_router

    app.dependency_overrides[videos_router.get_video_repo] = lambda: repo
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()
