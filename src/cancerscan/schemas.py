"""Response payloads for the HTTP API."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Literal

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class VerdictRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    result: Literal["Non-cancer", "Cancer", "Unknown"]
    suggestion: str
    createdAt: str = Field(default_factory=utc_timestamp)


class PredictResponse(BaseModel):
    status: Literal["success"] = "success"
    message: str = "Model is predicted successfully"
    data: VerdictRecord


class HistoryItem(BaseModel):
    id: str
    history: VerdictRecord


class HistoriesResponse(BaseModel):
    status: Literal["success"] = "success"
    data: List[HistoryItem] = []


class FailResponse(BaseModel):
    status: str = "fail"
    message: str


class HealthResponse(BaseModel):
    status: str
    model: str
