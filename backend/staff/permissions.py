from rest_framework import permissions


class CanManageStaff(permissions.BasePermission):
    """Any signed-in user can read the roster; only admins change it."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user.is_staff or request.user.is_superuser)
