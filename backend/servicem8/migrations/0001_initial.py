from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SyncLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "sync_type",
                    models.CharField(
                        choices=[("full", "Full"), ("incremental", "Incremental"), ("webhook", "Webhook")],
                        default="full",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("in_progress", "In Progress"),
                            ("success", "Success"),
                            ("error", "Error"),
                            ("partial", "Partial"),
                        ],
                        default="in_progress",
                        max_length=20,
                    ),
                ),
                ("jobs_processed", models.IntegerField(default=0)),
                ("error_message", models.TextField(blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("started_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "sync_log",
                "ordering": ["-started_at", "-id"],
                "indexes": [
                    models.Index(fields=["started_at"], name="sync_log_started_at_idx"),
                    models.Index(fields=["status"], name="sync_log_status_idx"),
                ],
            },
        ),
    ]
