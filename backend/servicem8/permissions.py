from rest_framework import permissions


class IsSyncAdmin(permissions.BasePermission):
    """Only admins may trigger a ServiceM8 sync."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return bool(request.user.is_staff or request.user.is_superuser)
