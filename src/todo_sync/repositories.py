from __future__ import annotations

from abc import ABC, abstractmethod
from functools import lru_cache
from threading import RLock
from typing import Dict, List, Optional

from .models import TodoEntity
from .settings import get_settings


class StorageError(RuntimeError):
    """Raised when the record store cannot complete a write or a scan."""


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def find_by_external_id(self, external_id: str) -> Optional[TodoEntity]:
        """
        Return the todo linked to an external record id, or None.

        Backend failures are logged and reported as None rather than raised.
        """

    @abstractmethod
    def upsert(self, todo: TodoEntity) -> None:
        """Write the full todo by id, replacing any existing item. Raises StorageError."""

    @abstractmethod
    def scan_all(self) -> List[TodoEntity]:
        """Return every stored todo in no particular order. Raises StorageError."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TodoEntity] = {}

    def find_by_external_id(self, external_id: str) -> Optional[TodoEntity]:
        with self._lock:
            for item in self._items.values():
                if item.get("externalRecordId") == external_id:
                    return item.copy()
            return None

    def upsert(self, todo: TodoEntity) -> None:
        with self._lock:
            self._items[todo["id"]] = todo.copy()

    def scan_all(self) -> List[TodoEntity]:
        with self._lock:
            # Return copies to avoid external mutation
            return [t.copy() for t in self._items.values()]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository selected by settings.
    - memory: InMemoryRepository
    - dynamodb: DynamoDBRepository against TODOS_TABLE_NAME
    """
    settings = get_settings()
    if settings.persistence_backend == "dynamodb":
        from .db import DynamoDBRepository

        return DynamoDBRepository(
            settings.todos_table_name,
            index_name=settings.external_id_index_name,
            region_name=settings.aws_region,
        )
    return InMemoryRepository()
