import uuid
from django.db import models
from django.utils import timezone

from landhud.leadlists.statuses import StoredStatus, to_list


class LeadList(models.Model):
    """
    One uploaded property list and its progress through scrubbing.
    ``status`` holds the stored vocabulary; use ``list_status`` for the
    API-facing one.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, blank=True, default="")
    file_name = models.CharField(max_length=255)
    original_file_name = models.CharField(max_length=255, blank=True, default="")
    source = models.CharField(max_length=64, default="upload")

    county = models.CharField(max_length=120, blank=True, default="")
    state = models.CharField(max_length=64, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    status = models.CharField(max_length=16, choices=StoredStatus.choices, default=StoredStatus.PENDING, db_index=True)

    record_count = models.PositiveIntegerField(null=True, blank=True)
    download_url = models.URLField(max_length=1000, blank=True, default="")
    source_file_url = models.URLField(max_length=1000, blank=True, default="")
    error_message = models.TextField(blank=True, default="")

    metadata_json = models.JSONField(default=dict, blank=True)

    trigger_attempts = models.PositiveIntegerField(default=0)
    last_trigger_error = models.TextField(blank=True, default="")

    received_at = models.DateTimeField(default=timezone.now, editable=False, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)
    uploaded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "lead_lists"
        indexes = [
            models.Index(fields=["status", "received_at"], name="lead_lists_status_recv_idx"),
            models.Index(fields=["state", "county"], name="lead_lists_state_county_idx"),
        ]

    @property
    def list_status(self):
        return to_list(self.status)

    def __str__(self) -> str:
        return f"LeadList({self.id}, {self.file_name}, {self.status})"
