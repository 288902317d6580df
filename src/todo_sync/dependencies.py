from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends

from .airtable import AirtableClient, get_airtable_client
from .reconciliation import ReconciliationEngine
from .repositories import Repository, get_repository
from .settings import Settings, get_settings


def get_app_settings() -> Settings:
    return get_settings()


@lru_cache(maxsize=1)
def get_mirror() -> Optional[AirtableClient]:
    """Process-wide Airtable mirror for direct creation, or None when not configured."""
    return get_airtable_client()


def get_engine(
    repo: Repository = Depends(get_repository),
    mirror: Optional[AirtableClient] = Depends(get_mirror),
) -> ReconciliationEngine:
    return ReconciliationEngine(repo, mirror=mirror)


def get_webhook_engine(repo: Repository = Depends(get_repository)) -> ReconciliationEngine:
    """Engine for inbound Airtable changes; these never mirror back out."""
    return ReconciliationEngine(repo)
