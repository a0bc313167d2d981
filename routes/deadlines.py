"""API routes for recurrence options and recurring deadlines."""

# pylint: disable=duplicate-code

from __future__ import annotations

import hmac
from datetime import date
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel, Field

from config import config
from deadlines import (
    complete_deadline,
    next_deadline_id,
    read_deadlines,
    read_deadlines_raw,
    upcoming_deadlines,
    write_deadlines,
    annotate_deadline,
)
from recurring_dates import next_recurring_date
from utils.logging import configure_logger
from utils.recurrence import (
    normalize_recurrence_value,
    recurrence_label,
    recurrence_options,
)

router = APIRouter()

LOG_FILE = Path(config.LOG_DIR) / "deadlines_api.log"
logger = configure_logger(__name__, LOG_FILE)


class DeadlineCreateRequest(BaseModel):  # pylint: disable=too-few-public-methods
    """Schema for creating a deadline entry."""

    title: str = Field(..., min_length=1)
    due_date: Optional[date] = None
    is_recurring: bool = False
    recurring_pattern: Optional[str] = Field(
        default=None, description="Recurrence identifier from the catalog"
    )


def write_key_guard(operation: str):
    """Return a dependency that checks ``X-API-Key`` before ``operation``.

    Nothing is checked while ``config.API_KEY`` is empty.
    """

    def _guard(api_key: str | None = Header(None, alias="X-API-Key")) -> None:
        expected = (config.API_KEY or "").strip()
        if not expected:
            return
        provided = (api_key or "").strip()
        if not hmac.compare_digest(provided.encode(), expected.encode()):
            logger.warning("Rejected request to %s: bad API key", operation)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"A valid X-API-Key header is required to {operation}.",
            )

    return _guard


@router.get("/recurrence-patterns")
def list_recurrence_patterns():
    """Return the recurrence choices for selection controls."""
    logger.info("GET /recurrence-patterns")
    return recurrence_options()


@router.get("/recurrence-patterns/{pattern}/label")
def get_recurrence_label(pattern: str):
    """Return the display label for ``pattern``, echoing unknown identifiers."""
    return {"pattern": pattern, "label": recurrence_label(pattern)}


@router.get("/recurrence-patterns/{pattern}/next")
def preview_next_date(pattern: str, anchor: date = Query(...)):
    """Return the occurrence that follows ``anchor`` for ``pattern``."""
    logger.info("GET /recurrence-patterns/%s/next anchor=%s", pattern, anchor)
    upcoming = next_recurring_date(anchor, pattern)
    return {
        "anchor": anchor.isoformat(),
        "pattern": pattern,
        "label": recurrence_label(pattern),
        "next": upcoming.isoformat(),
    }


@router.get("/deadlines")
def list_deadlines():
    """Return all saved deadlines with labels and due flags."""
    logger.info("GET /deadlines")
    deadlines = read_deadlines()
    logger.info("Returning %d deadlines", len(deadlines))
    return deadlines


@router.get("/deadlines/upcoming")
def list_upcoming_deadlines(days: Optional[int] = Query(None, ge=0)):
    """Return incomplete deadlines that are overdue or due within ``days``."""
    logger.info("GET /deadlines/upcoming days=%s", days)
    return upcoming_deadlines(days=days)


@router.post("/deadlines", status_code=status.HTTP_201_CREATED)
def create_deadline(
    payload: DeadlineCreateRequest,
    _: None = Depends(write_key_guard("create deadlines")),
):
    """Validate and persist a new deadline."""
    logger.info("POST /deadlines payload_received")
    pattern = None
    if payload.is_recurring:
        raw = payload.recurring_pattern or config.DEFAULT_RECURRENCE
        pattern = normalize_recurrence_value(raw)
        if pattern is None:
            logger.warning("Rejected unknown recurrence pattern %r", raw)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown recurrence pattern: {raw}",
            )

    deadlines = read_deadlines_raw()
    entry = {
        "id": next_deadline_id(deadlines),
        "title": payload.title.strip(),
        "due_date": payload.due_date.isoformat() if payload.due_date else None,
        "is_recurring": payload.is_recurring,
        "recurring_pattern": pattern,
        "completed": False,
    }
    deadlines.append(entry)
    write_deadlines(deadlines)
    logger.info("Created deadline id=%s", entry["id"])
    return annotate_deadline(entry)


@router.post("/deadlines/{deadline_id}/complete")
def complete_deadline_route(
    deadline_id: int,
    _: None = Depends(write_key_guard("complete deadlines")),
):
    """Complete a deadline, advancing it when it recurs."""
    logger.info("POST /deadlines/%s/complete", deadline_id)
    deadlines = read_deadlines_raw()
    for deadline in deadlines:
        if deadline.get("id") == deadline_id:
            complete_deadline(deadline)
            write_deadlines(deadlines)
            return annotate_deadline(deadline)
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Deadline {deadline_id} not found",
    )
