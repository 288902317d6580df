from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    ``title`` is optional at the schema level so that a missing or empty title
    is answered with a 400 by the route rather than a validation error.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item (required)")
    description: Optional[str] = Field(default=None, description="Optional detailed description")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "5f1c1a57-0f3e-4c4e-9a39-5d0f1f9b2a11",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "createdAt": "2025-01-25T10:15:30.123Z",
                "source": "api",
                "externalRecordId": "recA1b2C3d4E5f6G7",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(..., description="Completion status flag")
    created_at: str = Field(..., alias="createdAt", description="Creation timestamp (ISO8601, UTC)")
    source: str = Field(..., description="Origin of the record: 'api' or 'external'")
    external_record_id: Optional[str] = Field(
        default=None, alias="externalRecordId", description="Linked Airtable record id, if any"
    )


class CreateTodoResponse(BaseModel):
    todo: TodoOut
    message: str
    table_name: str = Field(..., alias="tableName")
    stage: str


class TodoListResponse(BaseModel):
    """
    Envelope for the list endpoint. Items are newest first.
    """

    todos: List[TodoOut] = Field(..., description="All todos, sorted by createdAt descending")
    count: int = Field(..., description="Number of todos returned")
    table_name: str = Field(..., alias="tableName")
    stage: str


# Airtable webhook payload. Every level is optional: a missing or null
# container means "no changes" rather than an error. Individual record
# changes stay untyped here and are interpreted one by one during ingestion.


class TableChanges(BaseModel):
    model_config = ConfigDict(extra="allow")

    changed_records_by_id: Optional[Dict[str, Any]] = Field(default=None, alias="changedRecordsById")


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    changed_tables_by_id: Optional[Dict[str, TableChanges]] = Field(default=None, alias="changedTablesById")


class WebhookResponse(BaseModel):
    message: str
    processed_count: int = Field(..., alias="processedCount")
    created_count: int = Field(..., alias="createdCount")
    updated_count: int = Field(..., alias="updatedCount")
    table_name: str = Field(..., alias="tableName")
    stage: str
    timestamp: str
