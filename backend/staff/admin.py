from django.contrib import admin
from .models import Staff


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'role', 'daily_capacity_hours', 'active', 'created_at']
    list_filter = ['role', 'active']
    search_fields = ['id', 'name']
    readonly_fields = ['created_at']
