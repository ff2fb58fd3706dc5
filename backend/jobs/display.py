"""
Job card presentation rules.

Lifecycle phase drives the card's primary colour; urgency only adds a
secondary ring and badge. The two axes are never merged into one value.
"""
from __future__ import annotations

from typing import Dict, Optional

from django.conf import settings

COLOR_COMPLETED = 'border-l-green-500 bg-green-50/50'
COLOR_QUOTE = 'border-l-orange-500 bg-orange-50/50'
COLOR_WORK_ORDER = 'border-l-blue-500 bg-blue-50/30'

URGENCY_RINGS = {
    'critical': 'ring-2 ring-red-300',
    'high': 'ring-1 ring-orange-200',
}

URGENCY_INDICATORS = {
    'critical': {'icon': 'alert-circle', 'color': 'text-red-500', 'label': 'Critical priority - needs immediate attention'},
    'high': {'icon': 'alert-triangle', 'color': 'text-orange-500', 'label': 'High priority - follow up soon'},
    'medium': {'icon': 'clock', 'color': 'text-blue-500', 'label': 'Normal priority'},
    'low': {'icon': 'check-circle', 'color': 'text-green-500', 'label': 'Low priority'},
}

COMMUNICATION_ICONS = {
    'email': {'icon': 'mail', 'color': 'text-purple-500'},
    'sms': {'icon': 'message-square', 'color': 'text-blue-500'},
    'call': {'icon': 'phone', 'color': 'text-green-500'},
    'activity': {'icon': 'activity', 'color': 'text-orange-500'},
    'note': {'icon': 'file-text', 'color': 'text-gray-500'},
}

# (days since last contact, days since quote sent) at which a job escalates
URGENCY_THRESHOLDS = (
    ('critical', 14, 15),
    ('high', 7, 10),
    ('medium', 3, 3),
)


def is_completed(status: Optional[str], scheduler_stage: Optional[str] = None) -> bool:
    return status == 'complete' or scheduler_stage == 'recently_completed'


def lifecycle_color(status: Optional[str], lifecycle_phase: Optional[str], scheduler_stage: Optional[str] = None) -> str:
    if is_completed(status, scheduler_stage):
        return COLOR_COMPLETED
    if lifecycle_phase == 'quote':
        return COLOR_QUOTE
    return COLOR_WORK_ORDER


def urgency_ring(urgency: Optional[str]) -> str:
    return URGENCY_RINGS.get(urgency or '', '')


def urgency_indicator(urgency: Optional[str]) -> Dict[str, str]:
    """Icon, colour and tooltip for an urgency level; unknown levels read as medium."""
    return URGENCY_INDICATORS.get(urgency or '', URGENCY_INDICATORS['medium'])


def communication_icon(kind: Optional[str]) -> Dict[str, str]:
    return COMMUNICATION_ICONS.get(kind or '', COMMUNICATION_ICONS['note'])


def derive_urgency(days_since_last_contact: Optional[int], days_since_quote_sent: Optional[int] = None) -> str:
    """Bucket a job by how stale its contact and quote are."""
    contact = days_since_last_contact or 0
    quote = days_since_quote_sent
    for level, contact_days, quote_days in URGENCY_THRESHOLDS:
        if contact > contact_days or (quote is not None and quote > quote_days):
            return level
    return 'low'


def quote_age_color(days_since_quote_sent: Optional[int]) -> str:
    if days_since_quote_sent is None:
        return ''
    if days_since_quote_sent <= 3:
        return 'text-green-600'
    if days_since_quote_sent <= 10:
        return 'text-yellow-600'
    if days_since_quote_sent <= 15:
        return 'text-orange-600'
    return 'text-red-600'


def servicem8_job_url(service_m8_uuid: str) -> str:
    base = getattr(settings, 'SERVICEM8_WEB_URL', 'https://go.servicem8.com').rstrip('/')
    return f"{base}/job/{service_m8_uuid}"
