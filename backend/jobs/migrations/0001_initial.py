from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Job",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("service_m8_uuid", models.CharField(max_length=64, unique=True)),
                ("job_id", models.CharField(max_length=50)),
                ("customer_name", models.CharField(max_length=255)),
                ("address", models.TextField()),
                ("description", models.TextField(blank=True, null=True)),
                ("quote_value", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("status", models.CharField(max_length=50)),
                (
                    "lifecycle_phase",
                    models.CharField(
                        choices=[("quote", "Quote"), ("work_order", "Work Order")],
                        default="quote",
                        max_length=20,
                    ),
                ),
                ("scheduler_stage", models.CharField(blank=True, max_length=50, null=True)),
                ("sales_stage", models.CharField(blank=True, max_length=50, null=True)),
                ("days_since_quote_sent", models.IntegerField(blank=True, null=True)),
                ("hours_since_quote_sent", models.IntegerField(blank=True, null=True)),
                ("days_since_last_contact", models.IntegerField(default=0)),
                (
                    "last_contact_who",
                    models.CharField(blank=True, choices=[("us", "Us"), ("client", "Client")], max_length=10, null=True),
                ),
                ("last_communication_date", models.DateTimeField(blank=True, null=True)),
                (
                    "last_communication_type",
                    models.CharField(
                        blank=True,
                        choices=[("email", "Email"), ("sms", "SMS"), ("call", "Call"), ("note", "Note")],
                        max_length=10,
                        null=True,
                    ),
                ),
                ("last_note", models.TextField(blank=True, null=True)),
                ("assigned_staff", models.CharField(blank=True, max_length=100, null=True)),
                (
                    "urgency",
                    models.CharField(
                        choices=[("critical", "Critical"), ("high", "High"), ("medium", "Medium"), ("low", "Low")],
                        default="low",
                        max_length=10,
                    ),
                ),
                ("due_date", models.DateTimeField(blank=True, null=True)),
                (
                    "purchase_order_status",
                    models.CharField(
                        choices=[("none", "None"), ("ordered", "Ordered"), ("received", "Received"), ("delayed", "Delayed")],
                        default="none",
                        max_length=20,
                    ),
                ),
                ("production_tasks", models.JSONField(blank=True, default=list)),
                ("estimated_production_duration", models.IntegerField(blank=True, help_text="Days", null=True)),
                (
                    "install_stage",
                    models.CharField(
                        choices=[
                            ("pending_posts", "Pending Posts"),
                            ("tentative_posts", "Tentative Posts"),
                            ("posts_scheduled", "Posts Scheduled"),
                            ("measuring", "Measuring"),
                            ("manufacturing_panels", "Manufacturing Panels"),
                            ("pending_panels", "Pending Panels"),
                            ("tentative_panels", "Tentative Panels"),
                            ("panels_scheduled", "Panels Scheduled"),
                            ("completed", "Completed"),
                        ],
                        default="pending_posts",
                        max_length=30,
                    ),
                ),
                ("post_install_date", models.DateTimeField(blank=True, null=True)),
                ("panel_install_date", models.DateTimeField(blank=True, null=True)),
                ("tentative_post_date", models.DateTimeField(blank=True, null=True)),
                ("tentative_panel_date", models.DateTimeField(blank=True, null=True)),
                ("tentative_notes", models.TextField(blank=True, null=True)),
                ("post_install_duration", models.IntegerField(blank=True, help_text="Hours", null=True)),
                ("post_install_crew_size", models.IntegerField(blank=True, null=True)),
                ("panel_install_duration", models.IntegerField(blank=True, help_text="Hours", null=True)),
                ("panel_install_crew_size", models.IntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("synced_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "jobs",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="jobs_status_idx"),
                    models.Index(fields=["assigned_staff"], name="jobs_assigned_staff_idx"),
                    models.Index(fields=["scheduler_stage"], name="jobs_scheduler_stage_idx"),
                ],
            },
        ),
    ]
