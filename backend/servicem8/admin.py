from django.contrib import admin
from .models import SyncLog


@admin.register(SyncLog)
class SyncLogAdmin(admin.ModelAdmin):
    list_display = ['id', 'sync_type', 'status', 'jobs_processed', 'started_at', 'completed_at']
    list_filter = ['sync_type', 'status']
    search_fields = ['error_message']
    readonly_fields = ['started_at', 'completed_at']

    fieldsets = (
        ('Run', {
            'fields': ('sync_type', 'status', 'jobs_processed')
        }),
        ('Result', {
            'fields': ('error_message', 'metadata')
        }),
        ('Timing', {
            'fields': ('started_at', 'completed_at')
        }),
    )
