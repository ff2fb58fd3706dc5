"""
Shared helpers for ServiceM8 parsing and mapping.
Keep all parsing logic here so services/views/commands are consistent.
"""
from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple, Optional, Tuple
import logging

from django.utils import timezone

logger = logging.getLogger(__name__)

# ServiceM8 writes this for "never" on timestamp columns
NULL_TIMESTAMP = "0000-00-00 00:00:00"

WORK_ORDER_STATUSES = ("work order", "in progress", "scheduled", "completed", "job complete")

TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


class StatusMapping(NamedTuple):
    lifecycle_phase: str
    scheduler_stage: str
    status: str


def safe_strip(value: Any) -> Any:
    """Safely strip a value, returning None if value is None or empty string."""
    if value is None:
        return None
    if isinstance(value, str):
        v = value.strip()
        return v if v else None
    return value


def is_truthy_flag(value: Any) -> bool:
    """ServiceM8 booleans arrive as true/false, 1/0 or "1"/"0" depending on the endpoint."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return False


def parse_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        text = str(value).strip().replace(",", "")
        if not text or text.lower() in {"none", "null"}:
            return None
        return Decimal(text)
    except (InvalidOperation, ValueError):
        return None


def parse_servicem8_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a ServiceM8 timestamp ("2024-03-01 14:05:00", account-local time)
    into an aware datetime. Blank and zero timestamps return None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text or text == NULL_TIMESTAMP or text.startswith("0000-00-00"):
            return None
        parsed = None
        for fmt in TIMESTAMP_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                logger.warning("Could not parse ServiceM8 timestamp: %r", value)
                return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, timezone.get_current_timezone())
    return parsed


def quote_age(quote_sent: Any, quote_sent_stamp: Any, now: Optional[datetime] = None) -> Tuple[Optional[int], Optional[int]]:
    """
    Age of a sent quote as (days, hours).

    Only the actual send stamp counts; the quote creation date is ignored.
    Under 24 hours the age is kept in hours with days = 0, otherwise in
    whole days with hours = None. Unsent quotes give (None, None).
    """
    if not is_truthy_flag(quote_sent):
        return None, None
    sent_at = parse_servicem8_timestamp(quote_sent_stamp)
    if sent_at is None:
        return None, None
    elapsed = max(((now or timezone.now()) - sent_at).total_seconds(), 0)
    total_hours = math.floor(elapsed / 3600)
    if total_hours < 24:
        return 0, total_hours
    return math.floor(elapsed / 86400), None


def days_since(moment: Optional[datetime], now: Optional[datetime] = None) -> int:
    if moment is None:
        return 0
    return max(math.floor(((now or timezone.now()) - moment).total_seconds() / 86400), 0)


def map_servicem8_status(sm8_status: Optional[str]) -> StatusMapping:
    """
    Map a ServiceM8 job status onto (lifecycle phase, scheduler stage, board status).

    Closed statuses are checked first so "Job Complete" never reads as a
    work order and "Quote Lost" never reads as an open quote.
    """
    status = (sm8_status or "").lower()

    if any(word in status for word in ("unsuccessful", "lost", "cancelled", "canceled")):
        return StatusMapping("quote", "new_jobs_won", "unsuccessful")

    if any(word in status for word in ("complete", "finished", "done")):
        return StatusMapping("work_order", "recently_completed", "complete")

    if any(name in status for name in WORK_ORDER_STATUSES):
        if "progress" in status or "production" in status:
            return StatusMapping("work_order", "in_production", "in_production")
        if "scheduled" in status:
            return StatusMapping("work_order", "in_production", "scheduled")
        return StatusMapping("work_order", "new_jobs_won", "work_order")

    if "quote" in status or "estimate" in status:
        return StatusMapping("quote", "new_jobs_won", "quote_pending")

    if "lead" in status:
        return StatusMapping("quote", "new_jobs_won", "new_lead")

    return StatusMapping("quote", "new_jobs_won", "quote_pending")
