from django.db import migrations, models
import uuid
from django.utils import timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LeadList",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                ("file_name", models.CharField(max_length=255)),
                ("original_file_name", models.CharField(blank=True, default="", max_length=255)),
                ("source", models.CharField(default="upload", max_length=64)),
                ("county", models.CharField(blank=True, default="", max_length=120)),
                ("state", models.CharField(blank=True, default="", max_length=64)),
                ("notes", models.TextField(blank=True, default="")),
                ("status", models.CharField(
                    choices=[
                        ("pending", "Pending"),
                        ("processing", "Processing"),
                        ("ready", "Ready"),
                        ("launched", "Launched"),
                        ("cancelled", "Cancelled"),
                        ("failed", "Failed"),
                    ],
                    db_index=True,
                    default="pending",
                    max_length=16,
                )),
                ("record_count", models.PositiveIntegerField(blank=True, null=True)),
                ("download_url", models.URLField(blank=True, default="", max_length=1000)),
                ("source_file_url", models.URLField(blank=True, default="", max_length=1000)),
                ("error_message", models.TextField(blank=True, default="")),
                ("metadata_json", models.JSONField(blank=True, default=dict)),
                ("trigger_attempts", models.PositiveIntegerField(default=0)),
                ("last_trigger_error", models.TextField(blank=True, default="")),
                ("received_at", models.DateTimeField(db_index=True, default=timezone.now, editable=False)),
                ("updated_at", models.DateTimeField(default=timezone.now)),
                ("uploaded_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={"db_table": "lead_lists"},
        ),
        migrations.AddIndex(
            model_name="leadlist",
            index=models.Index(fields=["status", "received_at"], name="lead_lists_status_recv_idx"),
        ),
        migrations.AddIndex(
            model_name="leadlist",
            index=models.Index(fields=["state", "county"], name="lead_lists_state_county_idx"),
        ),
    ]
