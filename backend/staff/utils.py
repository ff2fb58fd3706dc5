"""
Helpers for staff identifiers and the default roster.
"""
from __future__ import annotations

import re
from typing import Iterable

from .models import ALL_STAFF_ID, Staff

_WHITESPACE = re.compile(r'\s+')


def slugify_staff_name(name: str) -> str:
    """"Mike (Team A)" -> "mike_(team_a)": lower-cased, whitespace runs become underscores."""
    return _WHITESPACE.sub('_', name.strip().lower())


def generate_staff_id(name: str, taken_ids: Iterable[str] = ()) -> str:
    """
    Derive an id from ``name`` that collides with nothing in ``taken_ids``
    and is never the reserved filter sentinel. Collisions get a numeric
    suffix: "mike", "mike_2", "mike_3", ...
    """
    base = slugify_staff_name(name)
    if not base:
        raise ValueError("Staff name must not be empty")
    taken = set(taken_ids)
    taken.add(ALL_STAFF_ID)
    candidate = base
    counter = 2
    while candidate in taken:
        candidate = f"{base}_{counter}"
        counter += 1
    return candidate


DEFAULT_STAFF = [
    {'id': 'wayne', 'name': 'Wayne', 'role': 'sales', 'daily_capacity_hours': 8, 'skills': [], 'color': 'bg-blue-500'},
    {'id': 'dave', 'name': 'Dave', 'role': 'sales', 'daily_capacity_hours': 8, 'skills': [], 'color': 'bg-blue-500'},
    {'id': 'craig', 'name': 'Craig', 'role': 'production', 'daily_capacity_hours': 8, 'skills': ['production'], 'color': 'bg-amber-500'},
    {'id': 'sarah', 'name': 'Sarah', 'role': 'production', 'daily_capacity_hours': 8, 'skills': ['production'], 'color': 'bg-amber-500'},
    # Install Team A
    {'id': 'mike', 'name': 'Mike (Team A)', 'role': 'install', 'daily_capacity_hours': 8, 'skills': ['posts', 'panels'], 'color': 'bg-emerald-500'},
    {'id': 'tom', 'name': 'Tom (Team A)', 'role': 'install', 'daily_capacity_hours': 8, 'skills': ['posts', 'panels'], 'color': 'bg-emerald-500'},
    # Install Team B
    {'id': 'josh', 'name': 'Josh (Team B)', 'role': 'install', 'daily_capacity_hours': 8, 'skills': ['posts', 'panels'], 'color': 'bg-indigo-500'},
    {'id': 'sam', 'name': 'Sam (Team B)', 'role': 'install', 'daily_capacity_hours': 8, 'skills': ['posts', 'panels'], 'color': 'bg-indigo-500'},
]


def seed_default_staff(members=None) -> list[str]:
    """Create any default staff that don't exist yet; returns the ids created."""
    created = []
    for member in members if members is not None else DEFAULT_STAFF:
        if member['id'] == ALL_STAFF_ID:
            continue
        _, was_created = Staff.objects.get_or_create(
            id=member['id'],
            defaults={k: v for k, v in member.items() if k != 'id'},
        )
        if was_created:
            created.append(member['id'])
    return created
