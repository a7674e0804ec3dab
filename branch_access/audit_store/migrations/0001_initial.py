from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AccessAuditLog",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("occurred_at", models.DateTimeField()),
                ("user_id", models.CharField(max_length=128)),
                ("branch_id", models.CharField(max_length=64)),
                ("operation", models.CharField(max_length=16)),
                ("resource_type", models.CharField(max_length=16)),
                ("access_granted", models.BooleanField()),
                ("restriction_level", models.CharField(max_length=8)),
                ("reason", models.CharField(max_length=255)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "bac_access_audit_log",
                "ordering": ["occurred_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["user_id", "occurred_at"],
                        name="idx_audit_user_time",
                    ),
                    models.Index(
                        fields=["branch_id", "occurred_at"],
                        name="idx_audit_branch_time",
                    ),
                ],
            },
        ),
    ]
