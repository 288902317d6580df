from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from starlette.concurrency import run_in_threadpool

from ..dependencies import get_app_settings, get_webhook_engine
from ..reconciliation import ReconciliationEngine
from ..schemas import WebhookResponse
from ..settings import Settings
from ..utils import utc_now_iso
from ..webhook import ingest_batch, parse_payload

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1",
    tags=["webhook"],
)


# PUBLIC_INTERFACE
@router.post(
    "/webhook",
    response_model=WebhookResponse,
    status_code=status.HTTP_200_OK,
    summary="Airtable Webhook",
    description=(
        "Apply an Airtable change notification. Each changed record is created or updated "
        "by its Airtable record id; deleted records are ignored. Individual record failures "
        "are skipped and do not fail the batch."
    ),
    responses={
        200: {"description": "Webhook processed"},
        500: {"description": "Body could not be parsed"},
    },
)
async def receive_webhook(
    request: Request,
    engine: ReconciliationEngine = Depends(get_webhook_engine),
    settings: Settings = Depends(get_app_settings),
) -> WebhookResponse:
    """
    Receive an Airtable webhook delivery and reconcile it into the store.
    """
    logger.info("Airtable webhook received for table %s", settings.todos_table_name)
    # MalformedPayloadError is turned into a 500 by the app's exception handler
    payload = parse_payload(await request.body())
    counts = await run_in_threadpool(ingest_batch, payload, engine)
    return WebhookResponse(
        message="Webhook processed successfully",
        processedCount=counts.processed,
        createdCount=counts.created,
        updatedCount=counts.updated,
        tableName=settings.todos_table_name,
        stage=settings.stage,
        timestamp=utc_now_iso(),
    )
