"""Audit and rewrite stored recurrence patterns in the deadlines file.

Run with ``--check`` to report without writing. The exit status is 1 when
deadlines still carry a pattern the engine does not know (those advance by
a single day), or, in check mode, when a rewrite is pending.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import logging
from typing import Any, Dict, List, NamedTuple, Tuple

from config import config
from deadlines import read_deadlines_raw, write_deadlines
from utils.recurrence import normalize_recurrence_value

logger = logging.getLogger(__name__)


class RecurrenceAudit(NamedTuple):
    """Pending rewrites and unusable patterns, keyed by deadline id."""

    rewrites: Dict[Any, Tuple[str, str]]
    unsupported: List[Tuple[Any, str]]
    missing: List[Any]


def audit_deadlines(deadlines: List[Dict]) -> RecurrenceAudit:
    """Classify the recurrence pattern of every recurring deadline."""

    audit = RecurrenceAudit(rewrites={}, unsupported=[], missing=[])
    for deadline in deadlines:
        pattern = deadline.get("recurring_pattern")
        deadline_id = deadline.get("id")
        if not pattern:
            # Recurring without a pattern: completing it closes it for good.
            if deadline.get("is_recurring"):
                audit.missing.append(deadline_id)
            continue
        normalized = normalize_recurrence_value(pattern)
        if normalized is None:
            audit.unsupported.append((deadline_id, str(pattern)))
        elif normalized != pattern:
            audit.rewrites[deadline_id] = (str(pattern), normalized)
    return audit


def normalize_saved_deadlines(
    path: Path | str | None = None, *, check: bool = False
) -> RecurrenceAudit | None:
    """Rewrite recurrence values in place; with ``check`` only report them.

    Returns ``None`` when the file does not exist.
    """

    target = Path(path or config.DEADLINES_PATH)
    if not target.exists():
        logger.warning("Deadlines file %s does not exist", target)
        return None

    deadlines = read_deadlines_raw(target, log=False)
    audit = audit_deadlines(deadlines)
    for deadline_id, pattern in audit.unsupported:
        logger.warning(
            "Unsupported recurrence %s for deadline %s", pattern, deadline_id
        )
    for deadline_id in audit.missing:
        logger.warning("Recurring deadline %s has no recurrence pattern", deadline_id)

    if not audit.rewrites:
        logger.info("No recurrence changes needed for %s", target)
        return audit
    if check:
        for deadline_id, (old, new) in audit.rewrites.items():
            logger.warning("Deadline %s: %s would become %s", deadline_id, old, new)
        return audit

    for deadline in deadlines:
        pattern = deadline.get("recurring_pattern")
        normalized = normalize_recurrence_value(pattern) if pattern else None
        if normalized and normalized != pattern:
            deadline["recurring_pattern"] = normalized
    write_deadlines(deadlines, target)
    logger.info("Normalized %d recurrence values in %s", len(audit.rewrites), target)
    return audit


def exit_status(audit: RecurrenceAudit | None, *, check: bool = False) -> int:
    if audit is None:
        return 0
    if audit.unsupported or audit.missing:
        return 1
    if check and audit.rewrites:
        return 1
    return 0


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Normalize recurrence patterns in the saved deadlines file."
    )
    parser.add_argument(
        "path",
        nargs="?",
        help=(
            "Optional path to `deadlines.yaml`. "
            "Defaults to the configured DEADLINES_PATH."
        ),
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report pending rewrites and unsupported patterns without writing.",
    )
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    target = Path(args.path) if args.path else Path(config.DEADLINES_PATH)
    audit = normalize_saved_deadlines(target, check=args.check)
    return exit_status(audit, check=args.check)


if __name__ == "__main__":
    raise SystemExit(main())
