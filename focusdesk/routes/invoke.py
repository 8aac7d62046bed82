from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from ..commands import COMMANDS, invoke
from ..db import Database
from .common import get_db

router = APIRouter()


@router.get("/api/invoke")
def api_invoke_list():
    return {"commands": sorted(COMMANDS)}


@router.post("/api/invoke/{command}")
def api_invoke(command: str, args: dict[str, Any] | None = Body(default=None), db: Database = Depends(get_db)):
    """Desktop-shell bridge: run a named command, errors come back as a string."""
    if command not in COMMANDS:
        raise HTTPException(status_code=404, detail=f"unknown command: {command}")
    res = invoke(db, command, args)
    return {"ok": res.ok, "data": res.data, "error": res.error}
