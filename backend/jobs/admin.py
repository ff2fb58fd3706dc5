from django.contrib import admin
from .models import Job


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ['job_id', 'customer_name', 'status', 'lifecycle_phase', 'scheduler_stage',
                    'urgency', 'assigned_staff', 'install_stage', 'synced_at']
    list_filter = ['lifecycle_phase', 'status', 'scheduler_stage', 'urgency', 'install_stage', 'purchase_order_status']
    search_fields = ['job_id', 'customer_name', 'address', 'service_m8_uuid']
    readonly_fields = ['service_m8_uuid', 'created_at', 'updated_at', 'synced_at']

    fieldsets = (
        ('Job Information', {
            'fields': ('service_m8_uuid', 'job_id', 'customer_name', 'address', 'description', 'quote_value')
        }),
        ('Pipeline', {
            'fields': ('status', 'lifecycle_phase', 'scheduler_stage', 'sales_stage', 'urgency', 'assigned_staff')
        }),
        ('Communication', {
            'fields': ('days_since_quote_sent', 'hours_since_quote_sent', 'days_since_last_contact',
                       'last_contact_who', 'last_communication_date', 'last_communication_type', 'last_note')
        }),
        ('Production', {
            'fields': ('purchase_order_status', 'production_tasks', 'estimated_production_duration', 'due_date')
        }),
        ('Install Scheduling', {
            'fields': ('install_stage', 'post_install_date', 'panel_install_date',
                       'tentative_post_date', 'tentative_panel_date', 'tentative_notes',
                       'post_install_duration', 'post_install_crew_size',
                       'panel_install_duration', 'panel_install_crew_size')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at', 'synced_at')
        }),
    )
