from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..auth import require_api_key
from ..dependencies import get_app_settings, get_engine
from ..reconciliation import ReconciliationEngine
from ..repositories import Repository, get_repository
from ..schemas import CreateTodoResponse, TodoCreate, TodoListResponse, TodoOut
from ..settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1",
    tags=["todos"],
    dependencies=[Depends(require_api_key)],
)


# PUBLIC_INTERFACE
@router.post(
    "/todo",
    response_model=CreateTodoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description=(
        "Create a new Todo item. When Airtable is configured the todo is mirrored there "
        "first and linked by its Airtable record id; mirroring failures do not fail the request."
    ),
    responses={
        201: {"description": "Todo created successfully"},
        400: {"description": "Title is required"},
        500: {"description": "Record store failure"},
    },
)
def create_todo(
    payload: TodoCreate,
    engine: ReconciliationEngine = Depends(get_engine),
    settings: Settings = Depends(get_app_settings),
) -> CreateTodoResponse:
    """
    Create a new Todo from a first-party caller.
    """
    if not payload.title:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Title is required"})

    created = engine.create_direct(payload.title, payload.description)
    return CreateTodoResponse(
        todo=TodoOut(**created),
        message="Todo created successfully",
        tableName=settings.todos_table_name,
        stage=settings.stage,
    )


# PUBLIC_INTERFACE
@router.get(
    "/todos",
    response_model=TodoListResponse,
    summary="List Todos",
    description="Return every todo, newest first by createdAt.",
    responses={
        200: {"description": "List retrieved successfully"},
        500: {"description": "Record store failure"},
    },
)
def list_todos(
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> TodoListResponse:
    """
    List all todos sorted by creation time, descending.
    """
    # ISO8601 UTC strings sort chronologically
    items = sorted(repo.scan_all(), key=lambda t: t.get("createdAt") or "", reverse=True)
    logger.info("Retrieved %d todos from table %s", len(items), settings.todos_table_name)
    return TodoListResponse(
        todos=[TodoOut(**it) for it in items],
        count=len(items),
        tableName=settings.todos_table_name,
        stage=settings.stage,
    )
