# backend/servicem8/services.py
"""
ServiceM8 REST API Client
Handles communication with the ServiceM8 api_1.0 JSON endpoints.

- One requests.Session per client (keep-alive, auth headers set once)
- OData-style $filter/$top query strings, percent-encoded the way ServiceM8 expects
- Bulk lookups (contacts, companies, custom fields, feed) degrade to empty maps
  so a sync can still proceed; per-job notes/activity calls raise instead
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from django.conf import settings

from .utils import parse_servicem8_timestamp, safe_strip

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.servicem8.com/api_1.0"
UNASSIGNED = "Unassigned"
STAFF_FIELD_NAMES = ("customfield_staff_assigned", "Staff Assigned", "staff_assigned")


class ServiceM8Error(Exception):
    """Non-success response (or transport failure) talking to ServiceM8."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ServiceM8AuthError(ServiceM8Error):
    """ServiceM8 rejected the credentials (HTTP 401)."""


class ServiceM8NotConfigured(ServiceM8Error):
    """No API key or access token is configured."""


def odata_query(params: Dict[str, Any]) -> str:
    parts = []
    for key, value in params.items():
        if value is None:
            continue
        encoded_key = quote(key, safe="")
        encoded_value = quote(str(value), safe="'")
        parts.append(f"{encoded_key}={encoded_value}")
    return "&".join(parts)


def odata_literal(value: Any) -> str:
    """Body of an OData string literal; embedded quotes are doubled."""
    return str(value).replace("'", "''")


class ServiceM8Client:
    """
    Client for interacting with the ServiceM8 REST API.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> None:
        self.base_url = (base_url or getattr(settings, "SERVICEM8_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.api_key = api_key if api_key is not None else getattr(settings, "SERVICEM8_API_KEY", "")
        self.access_token = access_token if access_token is not None else getattr(settings, "SERVICEM8_ACCESS_TOKEN", "")
        self.timeout = timeout or getattr(settings, "SERVICEM8_TIMEOUT", 30)
        self.job_limit = getattr(settings, "SERVICEM8_JOB_LIMIT", 1000)
        self.bulk_limit = getattr(settings, "SERVICEM8_BULK_LIMIT", 5000)

        if not self.is_configured:
            logger.warning("SERVICEM8_API_KEY / SERVICEM8_ACCESS_TOKEN not configured")

        # Keep-alive HTTP
        self._session = requests.Session()
        self._session.headers.update(self._auth_headers())

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key or self.access_token)

    def _auth_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        elif self.api_key:
            headers["X-API-Key"] = self.api_key
        return headers

    # -----------------------
    # Core HTTP helpers
    # -----------------------

    def _get(self, resource: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if not self.is_configured:
            raise ServiceM8NotConfigured("ServiceM8 not configured. Set SERVICEM8_API_KEY or SERVICEM8_ACCESS_TOKEN.")

        url = f"{self.base_url}/{resource}"
        if params:
            url = f"{url}?{odata_query(params)}"

        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ServiceM8Error(f"ServiceM8 request failed: {e}") from e

        if response.status_code == 401:
            raise ServiceM8AuthError("ServiceM8 token expired. Please reconnect.", status_code=401)
        if not response.ok:
            logger.error("ServiceM8 API error on %s: %s %s", resource, response.status_code, response.text[:500])
            raise ServiceM8Error(
                f"ServiceM8 API Error: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ServiceM8Error(f"ServiceM8 returned invalid JSON for {resource}", status_code=response.status_code) from e

    def _get_list_or_empty(self, resource: str, params: Dict[str, Any], what: str) -> List[Dict[str, Any]]:
        try:
            data = self._get(resource, params)
        except ServiceM8Error as e:
            logger.warning("Could not fetch %s from ServiceM8: %s", what, e)
            return []
        return data if isinstance(data, list) else []

    # -----------------------
    # Jobs
    # -----------------------

    def fetch_jobs(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Active jobs. Raises ServiceM8Error on failure."""
        data = self._get("job.json", {"$filter": "active eq 1", "$top": limit or self.job_limit})
        return data if isinstance(data, list) else []

    def fetch_all_job_contacts(self) -> Dict[str, Dict[str, str]]:
        """job_uuid -> {first, last} for every job contact with a name."""
        contacts: Dict[str, Dict[str, str]] = {}
        for row in self._get_list_or_empty("jobcontact.json", {"$top": self.bulk_limit}, "job contacts"):
            job_uuid = row.get("job_uuid")
            first = safe_strip(row.get("first")) or ""
            last = safe_strip(row.get("last")) or ""
            if job_uuid and (first or last):
                contacts[job_uuid] = {"first": first, "last": last}
        return contacts

    def fetch_all_companies(self) -> Dict[str, str]:
        """company_uuid -> display name."""
        companies: Dict[str, str] = {}
        for row in self._get_list_or_empty("company.json", {"$top": self.bulk_limit}, "companies"):
            name = safe_strip(row.get("name")) or safe_strip(row.get("company_name"))
            if row.get("uuid") and name:
                companies[row["uuid"]] = name
        return companies

    def fetch_all_job_custom_fields(self, limit: Optional[int] = None) -> Dict[str, Dict[str, Any]]:
        """
        job_uuid -> {field_name: value}. Custom fields come back either as an
        expanded ``customfield_values`` list or as loose staff-related keys.
        """
        params = {"$filter": "active eq 1", "$top": limit or self.job_limit, "$expand": "customfield_values"}
        fields_by_job: Dict[str, Dict[str, Any]] = {}
        for job in self._get_list_or_empty("job.json", params, "job custom fields"):
            job_uuid = job.get("uuid")
            if not job_uuid:
                continue
            values: Dict[str, Any] = {}
            for cf in job.get("customfield_values") or []:
                if isinstance(cf, dict) and cf.get("field_name") and cf.get("value"):
                    values[cf["field_name"]] = cf["value"]
            for key, value in job.items():
                if "staff" in key.lower() or "Assigned" in key:
                    values[key] = value
            if values:
                fields_by_job[job_uuid] = values
        logger.info("Mapped custom fields for %s jobs", len(fields_by_job))
        return fields_by_job

    @staticmethod
    def staff_assigned(job_uuid: str, custom_fields: Dict[str, Dict[str, Any]]) -> str:
        fields = custom_fields.get(job_uuid) or {}
        for name in STAFF_FIELD_NAMES:
            value = safe_strip(fields.get(name))
            if value:
                return str(value)
        return UNASSIGNED

    # -----------------------
    # Communications
    # -----------------------

    def fetch_last_communications(self) -> Dict[str, Dict[str, Any]]:
        """
        job_uuid -> {date, type, note} for the most recent email/SMS we sent.
        Reads the activity feed; when the feed is unavailable, falls back to
        scanning job notes for "email sent"/"sms sent" style wording.
        """
        try:
            items = self._get("feeditem.json", {"$top": self.bulk_limit, "$orderby": "timestamp desc"})
        except ServiceM8Error as e:
            logger.info("Feed items unavailable (%s); falling back to notes", e)
            return self._last_communications_from_notes()

        latest: Dict[str, Dict[str, Any]] = {}
        for item in items if isinstance(items, list) else []:
            if item.get("related_object") != "job" or not item.get("related_object_uuid"):
                continue
            item_type = (item.get("type") or "").lower()
            if "sms" in item_type:
                kind = "sms"
            elif "email" in item_type:
                kind = "email"
            else:
                continue
            self._keep_latest(latest, item["related_object_uuid"], item.get("timestamp"), kind,
                              item.get("message") or item.get("description") or "")
        logger.info("Mapped last email/SMS for %s jobs", len(latest))
        return latest

    def _last_communications_from_notes(self) -> Dict[str, Dict[str, Any]]:
        latest: Dict[str, Dict[str, Any]] = {}
        params = {"$top": self.bulk_limit, "$orderby": "timestamp desc"}
        for note in self._get_list_or_empty("note.json", params, "notes"):
            if note.get("related_object") != "job" or not note.get("related_object_uuid"):
                continue
            text = (note.get("note") or "").lower()
            if any(phrase in text for phrase in ("email sent", "sent email", "emailed")):
                kind = "email"
            elif any(phrase in text for phrase in ("sms sent", "sent sms", "text sent")):
                kind = "sms"
            else:
                continue
            self._keep_latest(latest, note["related_object_uuid"], note.get("timestamp"), kind, note.get("note") or "")
        return latest

    @staticmethod
    def _keep_latest(latest: Dict[str, Dict[str, Any]], job_uuid: str, stamp: Any, kind: str, note: str) -> None:
        when: Optional[datetime] = parse_servicem8_timestamp(stamp)
        if when is None:
            return
        existing = latest.get(job_uuid)
        if existing is None or when > existing["date"]:
            latest[job_uuid] = {"date": when, "type": kind, "note": note}

    def fetch_job_notes(self, job_uuid: str) -> List[Dict[str, Any]]:
        data = self._get("note.json", {"$filter": f"related_object eq 'job' and related_object_uuid eq '{odata_literal(job_uuid)}'"})
        return data if isinstance(data, list) else []

    def fetch_job_activities(self, job_uuid: str) -> List[Dict[str, Any]]:
        data = self._get("jobactivity.json", {"$filter": f"job_uuid eq '{odata_literal(job_uuid)}'"})
        return data if isinstance(data, list) else []

    def fetch_job_history(self, job_uuid: str) -> Dict[str, Any]:
        """
        Activities and notes for one job, fetched in parallel. An expired
        token aborts the whole call; any other failure empties that half.
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            activities_future = executor.submit(self.fetch_job_activities, job_uuid)
            notes_future = executor.submit(self.fetch_job_notes, job_uuid)
            activities = self._history_half(activities_future, "activities", job_uuid)
            notes = self._history_half(notes_future, "notes", job_uuid)
        return {"activities": activities, "notes": notes, "totalItems": len(activities) + len(notes)}

    @staticmethod
    def _history_half(future, what: str, job_uuid: str) -> List[Dict[str, Any]]:
        try:
            return future.result()
        except (ServiceM8AuthError, ServiceM8NotConfigured):
            raise
        except ServiceM8Error as e:
            logger.warning("Could not fetch %s for job %s: %s", what, job_uuid, e)
            return []


def create_servicem8_client() -> Optional[ServiceM8Client]:
    """A configured client, or None when no credentials are set."""
    client = ServiceM8Client()
    return client if client.is_configured else None
