from __future__ import annotations

from fastapi import HTTPException, Request

from ..db import Database
from ..errors import NotFoundError, QueryExecutionError, StorageError, ValidationError


def get_db(request: Request) -> Database:
    return request.app.state.db


def to_http(e: StorageError) -> HTTPException:
    """Flatten a storage error to an HTTP status with the message as detail."""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, QueryExecutionError) and "constraint failed" in str(e):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))
