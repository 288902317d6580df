"""
Todo Sync package.

A todo API whose records live in DynamoDB and are reconciled with an Airtable
table through webhook deliveries. The FastAPI app lives in ``todo_sync.main``;
the API Gateway authorizer in ``todo_sync.handlers``.
"""

__version__ = "0.1.0"
