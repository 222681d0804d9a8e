"""Diagnostic log inspection."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from relay.dependencies import get_log_buffer
from relay.logbuffer import LogBuffer, LogEntry

router = APIRouter(tags=["diagnostics"])


class LogsResponse(BaseModel):
    logs: list[LogEntry]
    total: int
    capacity: int


@router.get("/logs", response_model=LogsResponse)
async def get_logs(
    limit: int = Query(default=50, ge=1, le=1000),
    buffer: LogBuffer = Depends(get_log_buffer),
):
    """Most recent log entries, oldest first. ``total`` counts everything still retained."""
    return LogsResponse(
        logs=buffer.snapshot(limit=min(limit, buffer.capacity)),
        total=len(buffer),
        capacity=buffer.capacity,
    )
