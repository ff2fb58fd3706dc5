from django.db import models


class SyncLog(models.Model):
    """
    Tracks each ServiceM8 sync run (manual or scheduled) for audit + troubleshooting.
    """
    TYPE_FULL = 'full'
    TYPE_INCREMENTAL = 'incremental'
    TYPE_WEBHOOK = 'webhook'
    SYNC_TYPE_CHOICES = [
        (TYPE_FULL, 'Full'),
        (TYPE_INCREMENTAL, 'Incremental'),
        (TYPE_WEBHOOK, 'Webhook'),
    ]

    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_SUCCESS = 'success'
    STATUS_ERROR = 'error'
    STATUS_PARTIAL = 'partial'
    STATUS_CHOICES = [
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_SUCCESS, 'Success'),
        (STATUS_ERROR, 'Error'),
        (STATUS_PARTIAL, 'Partial'),
    ]

    TRIGGER_MANUAL = 'manual'
    TRIGGER_AUTOMATIC = 'automatic'

    sync_type = models.CharField(max_length=20, choices=SYNC_TYPE_CHOICES, default=TYPE_FULL)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_IN_PROGRESS)
    jobs_processed = models.IntegerField(default=0)
    error_message = models.TextField(blank=True, null=True)
    metadata = models.JSONField(default=dict, blank=True)  # trigger, counts, failures, timings
    started_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'sync_log'
        ordering = ['-started_at', '-id']
        indexes = [
            models.Index(fields=['started_at'], name='sync_log_started_at_idx'),
            models.Index(fields=['status'], name='sync_log_status_idx'),
        ]

    def __str__(self) -> str:
        return f"SyncLog({self.id}) {self.sync_type} {self.status}"
