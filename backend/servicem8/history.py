"""
Job communication history: classification, ordering and the on-demand loader
behind the job card's details dialog.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import requests
from django.conf import settings

from .utils import parse_servicem8_timestamp

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No communication history found"
RECONNECT_HINT = "Please reconnect to ServiceM8 in Settings"
DEFAULT_ERROR = "Failed to load communication history"

# Checked in order; the first kind whose prefix matches wins.
ENTRY_PREFIXES = (
    ("email", ("email",)),
    ("sms", ("sms", "text")),
    ("call", ("call", "phone")),
)

# Used when neither entry method nor note type says what the note was.
TEXT_KEYWORDS = (
    ("email", ("email",)),
    ("sms", ("sms", "text")),
    ("call", ("call", "phone", "spoke", "rang")),
)


@dataclass
class CommunicationItem:
    uuid: str
    kind: str
    content: str
    date: Optional[datetime]
    staff_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat() if self.date else None
        return data


class NotesFetchError(Exception):
    """The job history endpoint answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @classmethod
    def from_response(cls, response) -> "NotesFetchError":
        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get("error") if isinstance(body, dict) else None
        return cls(message or f"Error {response.status_code}", status_code=response.status_code)


def classify_note(note: Mapping[str, Any]) -> str:
    for field in ("entry_method", "note_type"):
        value = (note.get(field) or "").strip().lower()
        if not value:
            continue
        for kind, prefixes in ENTRY_PREFIXES:
            if value.startswith(prefixes):
                return kind
    text = (note.get("note") or "").lower()
    for kind, keywords in TEXT_KEYWORDS:
        if any(word in text for word in keywords):
            return kind
    return "note"


def _note_item(note: Mapping[str, Any]) -> CommunicationItem:
    return CommunicationItem(
        uuid=note.get("uuid") or "",
        kind=classify_note(note),
        content=note.get("note") or "",
        date=parse_servicem8_timestamp(note.get("create_date") or note.get("timestamp")),
        staff_name=note.get("created_by_staff_name"),
    )


def _activity_item(activity: Mapping[str, Any]) -> CommunicationItem:
    start = activity.get("start_date")
    return CommunicationItem(
        uuid=activity.get("uuid") or "",
        kind="activity",
        content=f"Scheduled activity: {start} - {activity.get('end_date')}",
        date=parse_servicem8_timestamp(start),
    )


def sort_newest_first(items: Iterable[CommunicationItem]) -> List[CommunicationItem]:
    """Strictly descending by timestamp; undated items go last in their original order."""
    items = list(items)
    dated = [item for item in items if item.date is not None]
    undated = [item for item in items if item.date is None]
    return sorted(dated, key=lambda item: item.date, reverse=True) + undated


def build_communication_history(payload: Any) -> List[CommunicationItem]:
    """
    Turn a notes payload into display items, newest first.

    Accepts a bare list of notes (the notes endpoint) or a mapping with
    ``notes`` and ``activities`` lists (the job-history endpoint).
    """
    if isinstance(payload, Mapping):
        notes = payload.get("notes") or []
        activities = payload.get("activities") or []
    else:
        notes = payload or []
        activities = []
    items = [_note_item(n) for n in notes if isinstance(n, Mapping)]
    items += [_activity_item(a) for a in activities if isinstance(a, Mapping)]
    return sort_newest_first(items)


def fetch_job_history(
    job_uuid: str,
    *,
    base_url: Optional[str] = None,
    session: Optional[requests.Session] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = 30,
) -> Any:
    """GET the dashboard's job-history endpoint; non-success raises NotesFetchError."""
    base = (base_url or getattr(settings, "DASHBOARD_API_URL", "")).rstrip("/")
    url = f"{base}/servicem8/job-history/{job_uuid}/"
    try:
        response = (session or requests).get(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise NotesFetchError(str(e) or DEFAULT_ERROR) from e
    if not response.ok:
        raise NotesFetchError.from_response(response)
    return response.json()


class NotesDialog:
    """
    Loader state for one job's details dialog.

    Every ``open()`` issues a fresh fetch and bumps a generation counter;
    a response is applied only if its generation is still current, so a slow
    earlier fetch can never overwrite a newer one. ``close()`` also bumps the
    generation, dropping whatever is still in flight.

    With an ``executor`` the fetch runs in the background and ``open()``
    returns its Future; without one it runs inline.
    """

    def __init__(
        self,
        job_uuid: str,
        fetcher: Callable[[str], Any] = fetch_job_history,
        executor: Optional[Executor] = None,
    ):
        self.job_uuid = job_uuid
        self._fetcher = fetcher
        self._executor = executor
        self._lock = threading.Lock()
        self._generation = 0
        self.is_open = False
        self.loading = False
        self.items: List[CommunicationItem] = []
        self.error: Optional[str] = None

    def open(self) -> Optional[Future]:
        with self._lock:
            self._generation += 1
            generation = self._generation
            self.is_open = True
            self.loading = True
            self.error = None
        if self._executor is not None:
            return self._executor.submit(self._load, generation)
        self._load(generation)
        return None

    def close(self) -> None:
        with self._lock:
            self._generation += 1
            self.is_open = False
            self.loading = False

    def _load(self, generation: int) -> bool:
        try:
            items = build_communication_history(self._fetcher(self.job_uuid))
        except Exception as e:
            logger.warning("Failed to fetch job history for %s: %s", self.job_uuid, e)
            return self._finish(generation, [], str(e) or DEFAULT_ERROR)
        return self._finish(generation, items, None)

    def _finish(self, generation: int, items: List[CommunicationItem], error: Optional[str]) -> bool:
        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale job history response for %s", self.job_uuid)
                return False
            self.items = items
            self.error = error
            self.loading = False
            return True

    @property
    def is_empty(self) -> bool:
        return not self.loading and self.error is None and not self.items

    def state(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "open": self.is_open,
                "loading": self.loading,
                "items": [item.to_dict() for item in self.items],
                "error": self.error,
                "hint": RECONNECT_HINT if self.error else None,
                "empty_message": EMPTY_MESSAGE if self.is_empty else None,
            }
