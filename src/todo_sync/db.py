from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from .models import TodoEntity
from .repositories import Repository, StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Attrs:
    id: str = "id"
    title: str = "title"
    description: str = "description"
    completed: str = "completed"
    created_at: str = "createdAt"
    source: str = "source"
    external_record_id: str = "externalRecordId"


_ATTRS = _Attrs()

DEFAULT_INDEX_NAME = "external-record-index"


class DynamoDBRepository(Repository):
    """
    DynamoDB-backed repository.

    The table is keyed by ``id``; a global secondary index keyed by
    ``externalRecordId`` serves identity lookups.
    """

    def __init__(
        self,
        table_name: str,
        *,
        index_name: str = DEFAULT_INDEX_NAME,
        region_name: Optional[str] = None,
        table: Any = None,
    ) -> None:
        self._table_name = table_name
        self._index_name = index_name
        if table is None:
            table = boto3.resource("dynamodb", region_name=region_name).Table(table_name)
        self._table = table

    def _item_to_entity(self, item: Dict[str, Any]) -> TodoEntity:
        entity: TodoEntity = {
            "id": str(item[_ATTRS.id]),
            "title": str(item.get(_ATTRS.title) or ""),
            "completed": bool(item.get(_ATTRS.completed, False)),
            "createdAt": str(item.get(_ATTRS.created_at) or ""),
            "source": item.get(_ATTRS.source) or "api",
        }
        if item.get(_ATTRS.description) is not None:
            entity["description"] = str(item[_ATTRS.description])
        if item.get(_ATTRS.external_record_id):
            entity["externalRecordId"] = str(item[_ATTRS.external_record_id])
        return entity

    def find_by_external_id(self, external_id: str) -> Optional[TodoEntity]:
        try:
            resp = self._table.query(
                IndexName=self._index_name,
                KeyConditionExpression=Key(_ATTRS.external_record_id).eq(external_id),
            )
        except (BotoCoreError, ClientError):
            logger.exception("Error finding existing todo for external id %s", external_id)
            return None
        items = resp.get("Items") or []
        return self._item_to_entity(items[0]) if items else None

    def upsert(self, todo: TodoEntity) -> None:
        # None values would be written as NULL, which a GSI key attribute rejects
        item = {k: v for k, v in todo.items() if v is not None}
        try:
            self._table.put_item(Item=item)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"put_item failed for todo {todo['id']}: {exc}") from exc

    def scan_all(self) -> List[TodoEntity]:
        out: List[TodoEntity] = []
        start_key: Optional[Dict[str, Any]] = None
        while True:
            kwargs: Dict[str, Any] = {}
            if start_key:
                kwargs["ExclusiveStartKey"] = start_key
            try:
                resp = self._table.scan(**kwargs)
            except (BotoCoreError, ClientError) as exc:
                raise StorageError(f"scan failed on table {self._table_name}: {exc}") from exc
            out.extend(self._item_to_entity(i) for i in resp.get("Items") or [])
            start_key = resp.get("LastEvaluatedKey")
            if not start_key:
                break
        return out
