import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("LOGIN", "Login"),
                            ("LOGOUT", "Logout"),
                            ("LOGIN_FAILED", "Login failed"),
                            ("CREATE_ENTRY", "Create entry"),
                            ("UPDATE_ENTRY", "Update entry"),
                            ("DELETE_ENTRY", "Delete entry"),
                            ("VIEW_ENTRY", "View entry"),
                            ("VIEW_ENTRIES", "View entries"),
                        ],
                        max_length=32,
                    ),
                ),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("source_ip", models.CharField(max_length=45)),
                ("user_agent", models.TextField(blank=True, null=True)),
                ("resource_id", models.CharField(blank=True, max_length=64, null=True)),
                ("details", models.JSONField(blank=True, null=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_logs",
                        to="accounts.appuser",
                    ),
                ),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "indexes": [models.Index(fields=["actor", "action"], name="idx_audit_actor_action")],
            },
        ),
    ]
