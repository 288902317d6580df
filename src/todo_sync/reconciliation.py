"""
Merge rules for todos arriving from the first-party API and from Airtable.

Two entry points share one store:

- ``reconcile_external`` applies an Airtable change. The record is looked up
  by its Airtable id so the internal ``id`` and ``createdAt`` survive; every
  other field is taken from the incoming payload (last write wins).
- ``create_direct`` stores a brand-new first-party todo, optionally linking it
  to an Airtable record created on the fly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol

from .airtable import FIELD_DESCRIPTION, FIELD_NAME, FIELD_STATUS, STATUS_DONE
from .models import SOURCE_API, SOURCE_EXTERNAL, TodoEntity
from .repositories import Repository
from .resolver import IdentityResolver
from .utils import generate_id, utc_now_iso

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


class ExternalMirror(Protocol):
    def mirror_todo(self, todo: TodoEntity) -> Optional[str]: ...


@dataclass(frozen=True)
class ReconcileResult:
    todo: TodoEntity
    created: bool


def _text(value: Any) -> str:
    # Any falsy cell value (0, False, "") counts as absent
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


# PUBLIC_INTERFACE
class ReconciliationEngine:
    """
    Apply inbound changes to the record store while preserving identity.

    Args:
        repository: record store adapter.
        resolver: identity resolver; defaults to one over ``repository``.
        mirror: optional Airtable mirror used by ``create_direct``.
        clock: returns the current time as an ISO8601 string.
        id_factory: returns a fresh record id.
    """

    def __init__(
        self,
        repository: Repository,
        *,
        resolver: Optional[IdentityResolver] = None,
        mirror: Optional[ExternalMirror] = None,
        clock: Callable[[], str] = utc_now_iso,
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        self._repository = repository
        self._resolver = resolver or IdentityResolver(repository)
        self._mirror = mirror
        self._clock = clock
        self._id_factory = id_factory

    def reconcile_external(self, external_id: str, fields: Optional[Mapping[str, Any]]) -> ReconcileResult:
        """
        Upsert the todo linked to ``external_id`` from Airtable ``fields``.

        Title, description and completion are always overwritten; ``source``
        is always set to 'external', even for todos first created through the
        API. Store failures propagate to the caller.
        """
        fields = fields if isinstance(fields, Mapping) else {}
        existing = self._resolver.resolve(external_id)

        todo: TodoEntity = {
            "id": existing["id"] if existing else self._id_factory(),
            "title": _text(fields.get(FIELD_NAME)) or UNTITLED,
            "description": _text(fields.get(FIELD_DESCRIPTION)),
            "completed": fields.get(FIELD_STATUS) == STATUS_DONE,
            "createdAt": existing["createdAt"] if existing and existing.get("createdAt") else self._clock(),
            "source": SOURCE_EXTERNAL,
            "externalRecordId": external_id,
        }
        self._repository.upsert(todo)

        if existing:
            logger.info("Updated todo %s from Airtable record %s", todo["id"], external_id)
        else:
            logger.info("Created todo %s from Airtable record %s", todo["id"], external_id)
        return ReconcileResult(todo=todo, created=existing is None)

    def create_direct(self, title: str, description: Optional[str] = None) -> TodoEntity:
        """
        Create a first-party todo.

        The Airtable mirror is attempted before the write; its id is attached
        when available and the todo is stored either way.
        """
        todo: TodoEntity = {
            "id": self._id_factory(),
            "title": title,
            "completed": False,
            "createdAt": self._clock(),
            "source": SOURCE_API,
        }
        if description is not None:
            todo["description"] = description

        if self._mirror is not None:
            external_id = self._mirror.mirror_todo(todo)
            if external_id:
                todo["externalRecordId"] = external_id

        self._repository.upsert(todo)
        logger.info("Created todo %s (airtable=%s)", todo["id"], todo.get("externalRecordId"))
        return todo
