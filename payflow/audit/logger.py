"""
Append-only audit trail for polling sessions and flow steps.

Every lifecycle event gets an entry with:
  - Session ID (which polling session observed it)
  - Payment ID (which payment it concerns)
  - Action (what happened)
  - Details (status observed, error messages, attempt counts)
  - Timestamp (UTC)

Entries are frozen and only ever appended, so a caller can replay exactly
what a session saw, in the order it saw it.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger("payflow.audit")


@dataclass(frozen=True)
class AuditEntry:
    action: str
    session_id: Optional[str] = None
    payment_id: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def log_event(
    trail: Optional[list[AuditEntry]],
    action: str,
    session_id: Optional[str] = None,
    payment_id: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> AuditEntry:
    """
    Record an audit entry and log it.

    Args:
        trail: The list to append to, or ``None`` to only log.
        action: What happened (e.g. "poll_started", "snapshot_observed").
        session_id: The polling session that observed the event.
        payment_id: The payment the event relates to.
        details: Arbitrary JSON-serializable context.

    Returns:
        The created AuditEntry.
    """
    entry = AuditEntry(
        action=action,
        session_id=session_id,
        payment_id=payment_id,
        details=dict(details or {}),
    )
    if trail is not None:
        trail.append(entry)
    logger.info(
        "AUDIT | session=%s payment=%s action=%s | %s",
        session_id or "-",
        payment_id or "-",
        action,
        json.dumps(details, default=str)[:200] if details else "",
    )
    return entry
