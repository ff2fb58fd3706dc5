from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Staff",
            fields=[
                ("id", models.CharField(max_length=100, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                (
                    "role",
                    models.CharField(
                        choices=[("sales", "Sales"), ("production", "Production"), ("install", "Install")],
                        max_length=20,
                    ),
                ),
                ("daily_capacity_hours", models.IntegerField(default=8)),
                ("skills", models.JSONField(blank=True, default=list)),
                ("color", models.CharField(default="bg-gray-500", max_length=50)),
                ("active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name_plural": "staff",
                "db_table": "staff",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
