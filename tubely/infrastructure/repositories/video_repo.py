# tubely/infrastructure/repositories/video_repo.py
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from boto3.dynamodb.conditions import Attr

from tubely.domain.models.video import VideoRecord
from tubely.domain.repositories.video_repository_interface import IVideoRepository
import tubely.aws as aws_mod   # <-- importe o módulo, não o símbolo
from tubely.core.metrics import DDB_OPS


def _to_item(record: VideoRecord) -> dict:
    # campos opcionais vazios ficam fora do item
    return record.model_dump(mode="json", exclude_none=True)


def _from_item(item: dict) -> VideoRecord:
    return VideoRecord.model_validate(item)


class VideoRepo(IVideoRepository):
    def _call(self, op: str, fn, **kwargs):
        try:
            resp = fn(**kwargs)
            DDB_OPS.labels(op=op, status="ok").inc()
            return resp
        except Exception:
            DDB_OPS.labels(op=op, status="error").inc()
            raise

    def put(self, record: VideoRecord) -> None:
        self._call("put", aws_mod.table_videos.put_item, Item=_to_item(record))

    def get(self, video_id: UUID) -> Optional[VideoRecord]:
        resp = self._call("get", aws_mod.table_videos.get_item, Key={"id": str(video_id)})
        item = resp.get("Item")
        return _from_item(item) if item else None

    def update(self, record: VideoRecord) -> VideoRecord:
        updated = record.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        self._call("update", aws_mod.table_videos.put_item, Item=_to_item(updated))
        return updated

    def list_by_user(self, user_id: UUID) -> List[VideoRecord]:
        """
        Retorna todos os vídeos cujo atributo 'user_id' == user_id (do token).
        Observação: Scan + Filter; troque por Query com GSI para produção.
        """
        kwargs = {"FilterExpression": Attr("user_id").eq(str(user_id))}
        items: List[dict] = []
        while True:
            resp = self._call("scan", aws_mod.table_videos.scan, **kwargs)
            items.extend(resp.get("Items", []))
            last = resp.get("LastEvaluatedKey")
            if not last:
                break
            kwargs["ExclusiveStartKey"] = last
        records = [_from_item(i) for i in items]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def delete(self, video_id: UUID) -> None:
        self._call("delete", aws_mod.table_videos.delete_item, Key={"id": str(video_id)})
