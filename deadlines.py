"""Utilities for reading, completing and advancing saved deadlines."""

# pylint: disable=duplicate-code

from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import yaml

from config import config
from recurring_dates import next_recurring_date
from utils.logging import configure_logger
from utils.recurrence import recurrence_label

DEADLINES_FILE = Path(config.DEADLINES_PATH)
COMPLETION_LOG_PATH = Path(config.DEADLINE_COMPLETIONS_PATH)

LOG_FILE = Path(config.LOG_DIR) / "deadlines.log"
logger = configure_logger(__name__, LOG_FILE)

# Computed on read, never persisted.
RUNTIME_FIELDS = ("recurrence_label", "is_overdue", "is_due_today")


def parse_iso_date(value: Any) -> date | None:
    """Return ``value`` as a date, or ``None`` when it is missing or malformed."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def is_recurring(deadline: Mapping[str, Any]) -> bool:
    return bool(deadline.get("is_recurring")) and bool(
        deadline.get("recurring_pattern")
    )


def next_anchor(deadline: Mapping[str, Any], today: date | None = None) -> date | None:
    """Return the due date that follows the stored anchor of a recurring deadline."""
    if not is_recurring(deadline):
        return None
    anchor = parse_iso_date(deadline.get("due_date")) or today or date.today()
    return next_recurring_date(anchor, deadline.get("recurring_pattern"))


def annotate_deadline(
    deadline: Mapping[str, Any], today: date | None = None
) -> Dict[str, Any]:
    today = today or date.today()
    item = dict(deadline)
    due = parse_iso_date(item.get("due_date"))
    done = bool(item.get("completed"))
    item["recurrence_label"] = (
        recurrence_label(item.get("recurring_pattern")) if is_recurring(item) else ""
    )
    item["is_overdue"] = bool(due and due < today and not done)
    item["is_due_today"] = bool(due and due == today and not done)
    return item


def strip_runtime_fields(deadline: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in deadline.items() if key not in RUNTIME_FIELDS}


def read_deadlines_raw(path: Path = DEADLINES_FILE, *, log: bool = True) -> List[Dict]:
    """Return deadline entries from YAML without annotations."""
    if log:
        logger.info("Reading deadlines (raw) from %s", path)
    if not Path(path).exists():
        logger.info("%s does not exist", path)
        return []
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or []
    if not isinstance(data, list):
        logger.warning(
            "Ignoring %s: expected a list, got %s", path, type(data).__name__
        )
        return []
    deadlines = [item for item in data if isinstance(item, dict)]
    logger.debug("Loaded %d raw deadlines", len(deadlines))
    return deadlines


def read_deadlines(
    path: Path = DEADLINES_FILE, today: date | None = None
) -> List[Dict]:
    """Return all deadlines annotated with their label and due flags."""
    logger.info("Reading deadlines from %s", path)
    raw = read_deadlines_raw(path, log=False)
    return [annotate_deadline(item, today) for item in raw]


def write_deadlines(
    deadlines: Iterable[Mapping[str, Any]], path: Path = DEADLINES_FILE
) -> None:
    """Write deadlines to a YAML file, dropping computed fields."""
    entries = [strip_runtime_fields(item) for item in deadlines]
    logger.info("Writing %d deadlines to %s", len(entries), path)
    Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        yaml.dump(entries, handle, sort_keys=False, allow_unicode=True)


def next_deadline_id(deadlines: Iterable[Mapping[str, Any]]) -> int:
    ids = [item.get("id") for item in deadlines]
    return max((value for value in ids if isinstance(value, int)), default=0) + 1


def complete_deadline(
    deadline: Dict,
    today: date | None = None,
    *,
    completions_path: Path | None = None,
) -> None:
    """Mark a deadline complete, moving recurring ones to their next due date."""
    today_date = today or date.today()
    iso_today = today_date.isoformat()
    deadline["last_completed"] = iso_today
    record_deadline_completion(deadline, completed_at=iso_today, path=completions_path)
    upcoming = next_anchor(deadline, today_date)
    if upcoming is None:
        deadline["completed"] = True
        return
    logger.info(
        "Advancing deadline %s from %s to %s (%s)",
        deadline.get("id"),
        deadline.get("due_date"),
        upcoming,
        deadline.get("recurring_pattern"),
    )
    deadline["due_date"] = upcoming.isoformat()
    deadline["completed"] = False


def mark_deadlines_complete(
    deadline_ids: List[int],
    path: Path = DEADLINES_FILE,
    today: date | None = None,
    *,
    completions_path: Path | None = None,
) -> int:
    """Complete the selected deadline ids and persist the new anchors."""
    logger.info("Marking %d deadlines complete", len(deadline_ids))
    if deadline_ids:
        logger.debug("Deadline ids to complete: %s", deadline_ids)
    deadlines = read_deadlines_raw(path)
    count = 0
    for deadline in deadlines:
        if deadline.get("id") in deadline_ids:
            complete_deadline(deadline, today, completions_path=completions_path)
            count += 1
    write_deadlines(deadlines, path)
    logger.info("Updated %d deadlines", count)
    return count


def read_deadline_completions(path: Path | None = None) -> List[Dict]:
    target = path or COMPLETION_LOG_PATH
    if not target.exists():
        return []
    with open(target, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or []
    if isinstance(data, list):
        return data
    return []


def _write_deadline_completions(entries: List[Dict], path: Path | None = None) -> None:
    target = path or COMPLETION_LOG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as handle:
        yaml.dump(entries, handle, sort_keys=False, allow_unicode=True)


def record_deadline_completion(
    deadline: Mapping[str, Any],
    *,
    completed_at: str | date | None = None,
    path: Path | None = None,
) -> None:
    """Append a completion entry unless one exists for the same id and day."""
    stamp = completed_at or deadline.get("last_completed")
    if isinstance(stamp, date):
        stamp = stamp.isoformat()
    stamp = str(stamp or "").strip()
    if not stamp:
        return
    entry = {
        "deadline_id": deadline.get("id"),
        "title": str(deadline.get("title") or "Deadline"),
        "due_date": str(deadline.get("due_date") or ""),
        "recurring_pattern": str(deadline.get("recurring_pattern") or ""),
        "completed_at": stamp,
    }
    entries = read_deadline_completions(path=path)
    seen = {(item.get("deadline_id"), item.get("completed_at")) for item in entries}
    if (entry["deadline_id"], entry["completed_at"]) in seen:
        return
    entries.append(entry)
    _write_deadline_completions(entries, path=path)


def due_within(
    deadlines: Iterable[Mapping[str, Any]], days: int = 7, today: date | None = None
) -> List[Mapping[str, Any]]:
    """Return deadlines overdue or due within ``days`` from ``today``."""
    today = today or date.today()
    limit = today + timedelta(days=days)
    results = []
    for deadline in deadlines:
        due = parse_iso_date(deadline.get("due_date"))
        if due and due <= limit:
            results.append(deadline)
    return sorted(results, key=lambda item: parse_iso_date(item.get("due_date")))


def upcoming_deadlines(
    path: Path = DEADLINES_FILE,
    days: int | None = None,
    today: date | None = None,
) -> List[Mapping[str, Any]]:
    """Return incomplete deadlines overdue or due soon."""
    today = today or date.today()
    window = config.UPCOMING_WINDOW_DAYS if days is None else days
    logger.info(
        "Fetching upcoming deadlines from %s within %d days (today=%s)",
        path,
        window,
        today,
    )
    pending = [
        item for item in read_deadlines(path, today) if not item.get("completed")
    ]
    logger.debug("Found %d incomplete deadlines", len(pending))
    return due_within(pending, days=window, today=today)
