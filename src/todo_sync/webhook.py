from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from .reconciliation import ReconciliationEngine
from .schemas import WebhookPayload

logger = logging.getLogger(__name__)


class MalformedPayloadError(ValueError):
    """The webhook body could not be parsed into a change payload."""


@dataclass
class BatchCounts:
    processed: int = 0
    created: int = 0
    updated: int = 0


# PUBLIC_INTERFACE
def parse_payload(raw: bytes) -> WebhookPayload:
    """
    Parse a raw webhook body.

    An empty body, or a JSON value that is not an object, yields an empty
    payload. Invalid JSON, or table containers of the wrong shape, raise
    MalformedPayloadError. Individual record changes are not validated here.
    """
    if not raw or not raw.strip():
        return WebhookPayload()
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedPayloadError(f"Webhook body is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        return WebhookPayload()
    try:
        return WebhookPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedPayloadError(f"Webhook body has an unexpected structure: {e}") from e


def current_fields(change: Any) -> Optional[Mapping[str, Any]]:
    """
    Fields of a record's current state, or None when the record was deleted.

    A current state that is not an object, or whose ``fields`` is not an
    object, still counts as a change with no fields.
    """
    current = change.get("current") if isinstance(change, Mapping) else None
    if current is None:
        return None
    fields = current.get("fields") if isinstance(current, Mapping) else None
    return fields if isinstance(fields, Mapping) else {}


# PUBLIC_INTERFACE
def ingest_batch(payload: WebhookPayload, engine: ReconciliationEngine) -> BatchCounts:
    """
    Reconcile every changed record of an Airtable webhook payload.

    Records without a ``current`` state are deletions and are skipped. A
    failure on one record is logged and does not stop the batch.
    """
    counts = BatchCounts()
    tables = payload.changed_tables_by_id or {}

    for table_id, table_changes in tables.items():
        records = table_changes.changed_records_by_id or {}
        for record_id, change in records.items():
            try:
                fields = current_fields(change)
                if fields is None:
                    logger.info("Skipping deleted record %s in table %s", record_id, table_id)
                    continue
                result = engine.reconcile_external(record_id, fields)
            except Exception:
                logger.exception("Error processing record %s in table %s", record_id, table_id)
                continue

            counts.processed += 1
            if result.created:
                counts.created += 1
            else:
                counts.updated += 1

    logger.info(
        "Webhook batch done: processed=%d created=%d updated=%d",
        counts.processed,
        counts.created,
        counts.updated,
    )
    return counts
