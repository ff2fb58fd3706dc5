"""
Staff management form state.

The editor owns no persistence: it stages edits in a draft, and hands
committed members to the callbacks it was built with. The roster it shows
is read through ``staff`` (a sequence, or a zero-arg callable returning
the current sequence), minus the ``all`` filter sentinel.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .models import ALL_STAFF_ID, SKILL_CHOICES, SKILLS
from .utils import generate_staff_id

ROLE_OPTIONS = [
    {'value': 'sales', 'label': 'Sales'},
    {'value': 'production', 'label': 'Production'},
    {'value': 'install', 'label': 'Install'},
]

COLOR_OPTIONS = [
    {'value': 'bg-blue-500', 'label': 'Blue'},
    {'value': 'bg-emerald-500', 'label': 'Green'},
    {'value': 'bg-amber-500', 'label': 'Amber'},
    {'value': 'bg-purple-500', 'label': 'Purple'},
    {'value': 'bg-indigo-500', 'label': 'Indigo'},
    {'value': 'bg-rose-500', 'label': 'Rose'},
    {'value': 'bg-cyan-500', 'label': 'Cyan'},
    {'value': 'bg-orange-500', 'label': 'Orange'},
]

Member = Mapping[str, Any]
StaffSource = Union[Sequence[Member], Callable[[], Sequence[Member]]]


def blank_form() -> Dict[str, Any]:
    return {
        'name': '',
        'role': 'install',
        'daily_capacity_hours': 8,
        'skills': [],
        'color': 'bg-blue-500',
    }


def form_options() -> Dict[str, Any]:
    """Choices and defaults for the add/edit staff form."""
    return {
        'roles': ROLE_OPTIONS,
        'colors': COLOR_OPTIONS,
        'skills': [{'value': value, 'label': label} for value, label in SKILL_CHOICES],
        'defaults': blank_form(),
    }


def toggle_skill(skills: Optional[Sequence[str]], skill: str) -> List[str]:
    current = list(skills or [])
    if skill in current:
        return [s for s in current if s != skill]
    return current + [skill]


class StaffEditor:
    def __init__(
        self,
        staff: StaffSource,
        on_update: Callable[[Member], None],
        on_add: Callable[[Member], None],
        on_delete: Callable[[str], None],
    ):
        self._staff = staff
        self.on_update = on_update
        self.on_add = on_add
        self.on_delete = on_delete
        self.editing_id: Optional[str] = None
        self.edit_form: Dict[str, Any] = {}
        self.is_adding = False
        self.new_form: Dict[str, Any] = blank_form()

    @property
    def members(self) -> List[Member]:
        staff = self._staff() if callable(self._staff) else self._staff
        return [member for member in staff if member.get('id') != ALL_STAFF_ID]

    # -----------------------------
    # Edit existing
    # -----------------------------

    def start_edit(self, member: Member) -> None:
        self.editing_id = member['id']
        self.edit_form = {**member, 'skills': list(member.get('skills') or [])}

    def update_draft(self, **changes: Any) -> None:
        self.edit_form.update(changes)

    def toggle_draft_skill(self, skill: str) -> None:
        self._check_skill(skill)
        self.edit_form['skills'] = toggle_skill(self.edit_form.get('skills'), skill)

    def save_edit(self) -> bool:
        """Commit the draft; a draft without a name is left open and nothing is sent."""
        if not self.editing_id or not (self.edit_form.get('name') or '').strip():
            return False
        self.on_update(dict(self.edit_form))
        self.cancel_edit()
        return True

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.edit_form = {}

    # -----------------------------
    # Add new
    # -----------------------------

    def start_add(self) -> None:
        self.is_adding = True

    def update_new(self, **changes: Any) -> None:
        self.new_form.update(changes)

    def toggle_new_skill(self, skill: str) -> None:
        self._check_skill(skill)
        self.new_form['skills'] = toggle_skill(self.new_form.get('skills'), skill)

    def add_new(self) -> Optional[Dict[str, Any]]:
        name = (self.new_form.get('name') or '').strip()
        if not name:
            return None
        member = {
            'id': generate_staff_id(name, (m.get('id') for m in self.members)),
            'name': name,
            'role': self.new_form.get('role') or 'install',
            'daily_capacity_hours': self.new_form.get('daily_capacity_hours') or 8,
            'skills': list(self.new_form.get('skills') or []),
            'color': self.new_form.get('color') or 'bg-blue-500',
            'active': True,
        }
        self.on_add(member)
        self.new_form = blank_form()
        self.is_adding = False
        return member

    def cancel_add(self) -> None:
        self.new_form = blank_form()
        self.is_adding = False

    def delete(self, staff_id: str) -> None:
        self.on_delete(staff_id)
        if self.editing_id == staff_id:
            self.cancel_edit()

    @staticmethod
    def _check_skill(skill: str) -> None:
        if skill not in SKILLS:
            raise ValueError(f"Unknown skill: {skill!r}")
