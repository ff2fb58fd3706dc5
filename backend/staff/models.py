from django.core.exceptions import ValidationError
from django.db import models

# Sentinel used by the board's staff filter; never a real staff member.
ALL_STAFF_ID = 'all'

SKILL_CHOICES = [
    ('posts', 'Posts'),
    ('panels', 'Panels'),
    ('production', 'Production'),
]
SKILLS = tuple(value for value, _ in SKILL_CHOICES)


class StaffQuerySet(models.QuerySet):
    def listable(self):
        return self.exclude(id=ALL_STAFF_ID)

    def installers(self):
        return self.listable().filter(role=Staff.ROLE_INSTALL, active=True)


class Staff(models.Model):
    """
    A member of the sales, production or install team.
    Jobs reference staff informally through Job.assigned_staff.
    """
    ROLE_SALES = 'sales'
    ROLE_PRODUCTION = 'production'
    ROLE_INSTALL = 'install'
    ROLE_CHOICES = [
        (ROLE_SALES, 'Sales'),
        (ROLE_PRODUCTION, 'Production'),
        (ROLE_INSTALL, 'Install'),
    ]

    id = models.CharField(max_length=100, primary_key=True)
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES)
    daily_capacity_hours = models.IntegerField(default=8)
    skills = models.JSONField(default=list, blank=True)  # subset of SKILLS
    color = models.CharField(max_length=50, default='bg-gray-500')
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = StaffQuerySet.as_manager()

    class Meta:
        db_table = 'staff'
        ordering = ['created_at', 'id']
        verbose_name_plural = 'staff'

    def __str__(self):
        return f"{self.name} ({self.role})"

    def clean(self):
        if self.id == ALL_STAFF_ID:
            raise ValidationError({'id': f'"{ALL_STAFF_ID}" is reserved for the staff filter.'})
        unknown = [skill for skill in (self.skills or []) if skill not in SKILLS]
        if unknown:
            raise ValidationError({'skills': f'Unknown skills: {", ".join(unknown)}'})
