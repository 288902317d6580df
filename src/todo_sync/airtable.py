"""
Minimal Airtable REST client used to mirror first-party todos.

Only record creation is needed: webhook deliveries bring changes back in,
so nothing here reads from Airtable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .models import TodoEntity
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Airtable column names shared by the mirror and the webhook field mapping
FIELD_NAME = "Name"
FIELD_DESCRIPTION = "Description"
FIELD_STATUS = "Status"
STATUS_DONE = "Done"


@dataclass(frozen=True)
class AirtableCredentials:
    token: str
    base_id: str
    table_id: str


class AirtableApiError(RuntimeError):
    """Airtable answered with a non-success status or an unusable body."""


class AirtableClient:
    """
    HTTP client for one Airtable table.

    No retries: callers treat every failure as "not mirrored".
    """

    def __init__(
        self,
        credentials: AirtableCredentials,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = "https://api.airtable.com/v0",
        timeout_s: float = 10.0,
    ) -> None:
        self._creds = credentials
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._session = session or requests.Session()

    @property
    def table_url(self) -> str:
        return f"{self._base_url}/{self._creds.base_id}/{self._creds.table_id}"

    def create_record(self, fields: Dict[str, Any]) -> str:
        """
        Create a record and return its Airtable id.

        Raises:
            AirtableApiError: non-2xx response or a body without an id.
            requests.RequestException: transport failure.
        """
        headers = {
            "Authorization": f"Bearer {self._creds.token}",
            "Content-Type": "application/json",
        }
        resp = self._session.request(
            method="POST",
            url=self.table_url,
            json={"fields": fields},
            headers=headers,
            timeout=self._timeout_s,
        )
        if not 200 <= resp.status_code < 300:
            raise AirtableApiError(f"Airtable create failed {resp.status_code}: {resp.text}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise AirtableApiError("Airtable returned a non-JSON body") from e

        record_id = payload.get("id") if isinstance(payload, dict) else None
        if not record_id:
            raise AirtableApiError("Airtable returned a record without 'id'")
        return str(record_id)

    def mirror_todo(self, todo: TodoEntity) -> Optional[str]:
        """
        Best-effort creation of the Airtable counterpart of a todo.

        Returns the new Airtable record id, or None when the call failed for
        any reason. Never raises.
        """
        fields: Dict[str, Any] = {FIELD_NAME: todo["title"]}
        if todo.get("description"):
            fields[FIELD_DESCRIPTION] = todo["description"]

        logger.debug("Sending todo %s to Airtable", todo["id"])
        try:
            record_id = self.create_record(fields)
        except (requests.RequestException, AirtableApiError) as exc:
            logger.error("Failed to create todo %s in Airtable: %s", todo["id"], exc)
            return None

        logger.info("Created todo %s in Airtable as %s", todo["id"], record_id)
        return record_id


# PUBLIC_INTERFACE
def get_airtable_client(settings: Optional[Settings] = None) -> Optional[AirtableClient]:
    """Return a client when Airtable is fully configured, otherwise None."""
    settings = settings or get_settings()
    if not settings.airtable_configured:
        logger.info("Airtable not configured, skipping mirror")
        return None
    creds = AirtableCredentials(
        token=settings.airtable_api_key or "",
        base_id=settings.airtable_base_id or "",
        table_id=settings.airtable_table_id or "",
    )
    return AirtableClient(creds, timeout_s=settings.airtable_timeout_s)
