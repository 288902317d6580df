from __future__ import annotations

from typing import Optional

from .models import TodoEntity
from .repositories import Repository


class IdentityResolver:
    """Map an external record id to the internal todo it is linked to."""

    def __init__(self, repository: Repository) -> None:
        self._repository = repository

    def resolve(self, external_id: Optional[str]) -> Optional[TodoEntity]:
        if not external_id:
            return None
        return self._repository.find_by_external_id(external_id)
