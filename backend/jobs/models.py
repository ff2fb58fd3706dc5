from django.db import models


class Job(models.Model):
    """
    A fencing/deck job mirrored from ServiceM8 plus locally managed
    production and install scheduling state.
    """
    PHASE_QUOTE = 'quote'
    PHASE_WORK_ORDER = 'work_order'
    LIFECYCLE_PHASE_CHOICES = [
        (PHASE_QUOTE, 'Quote'),
        (PHASE_WORK_ORDER, 'Work Order'),
    ]

    URGENCY_CRITICAL = 'critical'
    URGENCY_HIGH = 'high'
    URGENCY_MEDIUM = 'medium'
    URGENCY_LOW = 'low'
    URGENCY_CHOICES = [
        (URGENCY_CRITICAL, 'Critical'),
        (URGENCY_HIGH, 'High'),
        (URGENCY_MEDIUM, 'Medium'),
        (URGENCY_LOW, 'Low'),
    ]

    CONTACT_US = 'us'
    CONTACT_CLIENT = 'client'
    LAST_CONTACT_WHO_CHOICES = [
        (CONTACT_US, 'Us'),
        (CONTACT_CLIENT, 'Client'),
    ]

    COMMUNICATION_TYPE_CHOICES = [
        ('email', 'Email'),
        ('sms', 'SMS'),
        ('call', 'Call'),
        ('note', 'Note'),
    ]

    PURCHASE_ORDER_STATUS_CHOICES = [
        ('none', 'None'),
        ('ordered', 'Ordered'),
        ('received', 'Received'),
        ('delayed', 'Delayed'),
    ]

    INSTALL_STAGE_CHOICES = [
        ('pending_posts', 'Pending Posts'),
        ('tentative_posts', 'Tentative Posts'),
        ('posts_scheduled', 'Posts Scheduled'),
        ('measuring', 'Measuring'),
        ('manufacturing_panels', 'Manufacturing Panels'),
        ('pending_panels', 'Pending Panels'),
        ('tentative_panels', 'Tentative Panels'),
        ('panels_scheduled', 'Panels Scheduled'),
        ('completed', 'Completed'),
    ]

    service_m8_uuid = models.CharField(max_length=64, unique=True)
    job_id = models.CharField(max_length=50)
    customer_name = models.CharField(max_length=255)
    address = models.TextField()
    description = models.TextField(blank=True, null=True)
    quote_value = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)

    # Pipeline position
    status = models.CharField(max_length=50)
    lifecycle_phase = models.CharField(max_length=20, choices=LIFECYCLE_PHASE_CHOICES, default=PHASE_QUOTE)
    scheduler_stage = models.CharField(max_length=50, blank=True, null=True)
    sales_stage = models.CharField(max_length=50, blank=True, null=True)

    # Contact recency
    days_since_quote_sent = models.IntegerField(blank=True, null=True)
    hours_since_quote_sent = models.IntegerField(blank=True, null=True)
    days_since_last_contact = models.IntegerField(default=0)
    last_contact_who = models.CharField(max_length=10, choices=LAST_CONTACT_WHO_CHOICES, blank=True, null=True)
    last_communication_date = models.DateTimeField(blank=True, null=True)
    last_communication_type = models.CharField(max_length=10, choices=COMMUNICATION_TYPE_CHOICES, blank=True, null=True)
    last_note = models.TextField(blank=True, null=True)

    assigned_staff = models.CharField(max_length=100, blank=True, null=True)
    urgency = models.CharField(max_length=10, choices=URGENCY_CHOICES, default=URGENCY_LOW)
    due_date = models.DateTimeField(blank=True, null=True)

    # Production
    purchase_order_status = models.CharField(max_length=20, choices=PURCHASE_ORDER_STATUS_CHOICES, default='none')
    production_tasks = models.JSONField(default=list, blank=True)  # list[{id, name, completed, assigned_to?}]
    estimated_production_duration = models.IntegerField(blank=True, null=True, help_text='Days')

    # Install scheduling
    install_stage = models.CharField(max_length=30, choices=INSTALL_STAGE_CHOICES, default='pending_posts')
    post_install_date = models.DateTimeField(blank=True, null=True)
    panel_install_date = models.DateTimeField(blank=True, null=True)
    tentative_post_date = models.DateTimeField(blank=True, null=True)
    tentative_panel_date = models.DateTimeField(blank=True, null=True)
    tentative_notes = models.TextField(blank=True, null=True)
    post_install_duration = models.IntegerField(blank=True, null=True, help_text='Hours')
    post_install_crew_size = models.IntegerField(blank=True, null=True)
    panel_install_duration = models.IntegerField(blank=True, null=True, help_text='Hours')
    panel_install_crew_size = models.IntegerField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    synced_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'jobs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='jobs_status_idx'),
            models.Index(fields=['assigned_staff'], name='jobs_assigned_staff_idx'),
            models.Index(fields=['scheduler_stage'], name='jobs_scheduler_stage_idx'),
        ]

    def __str__(self):
        return f"{self.job_id} - {self.customer_name}"
