from __future__ import annotations

from typing import Literal, TypedDict

SOURCE_API = "api"
SOURCE_EXTERNAL = "external"

Source = Literal["api", "external"]


class _TodoRequired(TypedDict):
    id: str
    title: str
    completed: bool
    createdAt: str
    source: Source


# PUBLIC_INTERFACE
class TodoEntity(_TodoRequired, total=False):
    """
    A Todo item as persisted in the record store.

    Keys are camelCase because the mapping is written to the store verbatim.

    Fields:
    - id: uuid4 string, generated at first creation and never changed
    - title: short title
    - description: optional text; omitted when absent
    - completed: completion flag
    - createdAt: ISO8601 UTC timestamp of first creation (immutable)
    - source: 'api' or 'external', the path that last claimed the record
    - externalRecordId: Airtable record id; omitted when never linked
    """

    description: str
    externalRecordId: str
