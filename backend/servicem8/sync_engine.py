# backend/servicem8/sync_engine.py
"""
ServiceM8 -> local jobs sync engine.

Design goals:
- Pull jobs and the bulk lookup tables (contacts, companies, custom fields,
  last communications) from ServiceM8 in parallel
- Upsert each job by service_m8_uuid, one transaction per job, so a single bad
  record marks the run "partial" instead of failing it
- Never overwrite fields the dashboard owns (install schedule, production
  tasks, purchase orders, durations) once a job exists locally
- Record every run in SyncLog and return structured stats

This module does NOT depend on DRF views. Views, management commands and
Celery tasks all call run_servicem8_sync().
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from jobs.display import derive_urgency
from jobs.models import Job
from .models import SyncLog
from .services import ServiceM8Client, UNASSIGNED
from .utils import days_since, is_truthy_flag, map_servicem8_status, parse_decimal, quote_age, safe_strip

logger = logging.getLogger(__name__)

UNKNOWN_CUSTOMER = "Unknown Customer"
DEFAULT_DESCRIPTION = "PVC Fencing Installation"
NO_ADDRESS = "No Address"
FRESH_QUOTE_DAYS = 3

# Set when a job is first created; the dashboard owns them afterwards.
LOCAL_DEFAULTS: Dict[str, Any] = {
    "purchase_order_status": "none",
    "production_tasks": [],
    "install_stage": "pending_posts",
    "estimated_production_duration": 7,
    "post_install_duration": 6,
    "post_install_crew_size": 2,
    "panel_install_duration": 8,
    "panel_install_crew_size": 2,
}


@dataclass(frozen=True)
class SyncConfig:
    sync_type: str
    trigger: str
    job_limit: int
    sync_communications: bool
    sync_custom_fields: bool
    max_workers: int


def resolve_customer_name(
    sm8_job: Dict[str, Any],
    contacts: Dict[str, Dict[str, str]],
    companies: Dict[str, str],
) -> str:
    """Job contact's "first last", else the company name, else Unknown Customer."""
    contact = contacts.get(sm8_job.get("uuid") or "")
    if contact and (contact.get("first") or contact.get("last")):
        return f"{contact.get('first', '')} {contact.get('last', '')}".strip()
    company_uuid = sm8_job.get("company_uuid")
    if company_uuid and companies.get(company_uuid):
        return companies[company_uuid]
    return UNKNOWN_CUSTOMER


def map_servicem8_job(
    sm8_job: Dict[str, Any],
    *,
    customer_name: Optional[str] = None,
    staff_assigned: str = UNASSIGNED,
    communication: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Translate one ServiceM8 job record into Job field values (synced fields only).
    """
    now = now or timezone.now()
    lifecycle_phase, scheduler_stage, status = map_servicem8_status(sm8_job.get("status"))
    days_sent, hours_sent = quote_age(sm8_job.get("quote_sent"), sm8_job.get("quote_sent_stamp"), now)

    sales_stage: Optional[str] = None
    if lifecycle_phase == Job.PHASE_QUOTE and status != "unsuccessful":
        if is_truthy_flag(sm8_job.get("quote_sent")):
            scheduler_stage = "quotes_sent"
            status = "quote_sent"
            sales_stage = "fresh" if days_sent is not None and days_sent <= FRESH_QUOTE_DAYS else "awaiting_reply"
        else:
            status = "new_lead"
            sales_stage = "new_lead"

    last_comm_date = communication.get("date") if communication else None
    days_contact = days_since(last_comm_date, now)

    generated_id = safe_strip(sm8_job.get("generated_job_id"))
    quote_value = parse_decimal(sm8_job.get("total_invoice_amount"))

    return {
        "service_m8_uuid": sm8_job["uuid"],
        "job_id": f"#{generated_id}" if generated_id else "#N/A",
        "customer_name": customer_name or UNKNOWN_CUSTOMER,
        "address": safe_strip(sm8_job.get("job_address")) or safe_strip(sm8_job.get("billing_address")) or NO_ADDRESS,
        "description": safe_strip(sm8_job.get("job_description")) or DEFAULT_DESCRIPTION,
        "quote_value": quote_value if quote_value is not None else Decimal("0"),
        "status": status,
        "lifecycle_phase": lifecycle_phase,
        "scheduler_stage": scheduler_stage,
        "sales_stage": sales_stage,
        "days_since_quote_sent": days_sent,
        "hours_since_quote_sent": hours_sent,
        "days_since_last_contact": days_contact,
        "last_contact_who": Job.CONTACT_US,
        "last_communication_date": last_comm_date,
        "last_communication_type": communication.get("type") if communication else None,
        "assigned_staff": staff_assigned,
        "last_note": safe_strip(sm8_job.get("work_done_description")) or "",
        "urgency": derive_urgency(days_contact, days_sent),
        "synced_at": now,
    }


class ServiceM8SyncEngine:
    def __init__(self, config: SyncConfig, client: Optional[ServiceM8Client] = None):
        self.config = config
        self.client = client or ServiceM8Client()

    def run(self) -> Dict[str, Any]:
        """
        Run a sync: fetch, map and upsert every active job.

        Returns stats dict.
        """
        log = SyncLog.objects.create(
            sync_type=self.config.sync_type,
            status=SyncLog.STATUS_IN_PROGRESS,
            metadata={"trigger": self.config.trigger},
        )

        started = timezone.now()
        stats: Dict[str, Any] = {"sync_log_id": log.id, "trigger": self.config.trigger, "started_at": started.isoformat()}
        processed = 0

        try:
            lookups = self._fetch_all()
            sm8_jobs = lookups["jobs"]
            stats["fetched"] = len(sm8_jobs)

            created = updated = 0
            failures: List[Dict[str, str]] = []
            for sm8_job in sm8_jobs:
                uuid = sm8_job.get("uuid")
                if not uuid:
                    failures.append({"uuid": "", "error": "missing uuid"})
                    continue
                try:
                    was_created = self._upsert(sm8_job, lookups, started)
                except Exception as e:
                    logger.warning("Failed to sync ServiceM8 job %s: %s", uuid, e, exc_info=True)
                    failures.append({"uuid": uuid, "error": str(e)})
                    continue
                processed += 1
                if was_created:
                    created += 1
                else:
                    updated += 1

            finished = timezone.now()
            stats.update({
                "jobs_processed": processed,
                "created": created,
                "updated": updated,
                "failed": len(failures),
                "finished_at": finished.isoformat(),
                "duration_seconds": (finished - started).total_seconds(),
            })

            log.status = SyncLog.STATUS_PARTIAL if failures else SyncLog.STATUS_SUCCESS
            log.jobs_processed = processed
            log.completed_at = finished
            log.metadata = {**stats, "failures": failures[:50]}
            if failures:
                log.error_message = f"{len(failures)} job(s) failed to sync"
            log.save(update_fields=["status", "jobs_processed", "completed_at", "metadata", "error_message"])

            stats["status"] = log.status
            logger.info("ServiceM8 sync %s finished: %s", log.id, log.status)
            return stats

        except Exception as e:
            log.status = SyncLog.STATUS_ERROR
            log.jobs_processed = processed
            log.completed_at = timezone.now()
            log.error_message = str(e)
            log.metadata = stats
            log.save(update_fields=["status", "jobs_processed", "completed_at", "error_message", "metadata"])
            logger.error("ServiceM8 sync failed", exc_info=True)
            raise

    # -----------------------------
    # Individual sync steps
    # -----------------------------

    def _fetch_all(self) -> Dict[str, Any]:
        """Jobs plus lookup maps, fetched concurrently. A failed job fetch raises."""
        with ThreadPoolExecutor(max_workers=max(1, self.config.max_workers)) as executor:
            futures = {
                "jobs": executor.submit(self.client.fetch_jobs, self.config.job_limit),
                "contacts": executor.submit(self.client.fetch_all_job_contacts),
                "companies": executor.submit(self.client.fetch_all_companies),
            }
            if self.config.sync_custom_fields:
                futures["custom_fields"] = executor.submit(self.client.fetch_all_job_custom_fields, self.config.job_limit)
            if self.config.sync_communications:
                futures["communications"] = executor.submit(self.client.fetch_last_communications)
            results = {name: future.result() for name, future in futures.items()}
        results.setdefault("custom_fields", {})
        results.setdefault("communications", {})
        return results

    def _upsert(self, sm8_job: Dict[str, Any], lookups: Dict[str, Any], now: datetime) -> bool:
        uuid = sm8_job["uuid"]
        fields = map_servicem8_job(
            sm8_job,
            customer_name=resolve_customer_name(sm8_job, lookups["contacts"], lookups["companies"]),
            staff_assigned=ServiceM8Client.staff_assigned(uuid, lookups["custom_fields"]),
            communication=lookups["communications"].get(uuid),
            now=now,
        )
        fields.pop("service_m8_uuid")
        with transaction.atomic():
            _, created = Job.objects.update_or_create(
                service_m8_uuid=uuid,
                defaults=fields,
                create_defaults={**fields, **LOCAL_DEFAULTS, "production_tasks": []},
            )
        return created


def run_servicem8_sync(
    *,
    sync_type: str = SyncLog.TYPE_FULL,
    trigger: str = SyncLog.TRIGGER_MANUAL,
    client: Optional[ServiceM8Client] = None,
) -> Dict[str, Any]:
    """
    Convenience function used by views/commands/tasks.
    """
    cfg = SyncConfig(
        sync_type=sync_type,
        trigger=trigger,
        job_limit=getattr(settings, "SERVICEM8_JOB_LIMIT", 1000),
        sync_communications=getattr(settings, "SERVICEM8_SYNC_COMMUNICATIONS", True),
        sync_custom_fields=getattr(settings, "SERVICEM8_SYNC_CUSTOM_FIELDS", True),
        max_workers=getattr(settings, "SERVICEM8_MAX_WORKERS", 4),
    )
    engine = ServiceM8SyncEngine(cfg, client=client)
    return engine.run()
