from rest_framework import serializers

from landhud.leadlists.models import LeadList
from landhud.leadlists.statuses import ListStatus, to_list


class LeadListSerializer(serializers.ModelSerializer):
    """
    API shape of a lead list. Legacy cache entries use the same keys.
    """
    fileName = serializers.CharField(source="file_name")
    originalFileName = serializers.CharField(source="original_file_name")
    status = serializers.SerializerMethodField()
    recordCount = serializers.IntegerField(source="record_count", allow_null=True)
    downloadUrl = serializers.CharField(source="download_url")
    sourceFileUrl = serializers.CharField(source="source_file_url")
    errorMessage = serializers.CharField(source="error_message")
    metadata = serializers.JSONField(source="metadata_json")
    triggerAttempts = serializers.IntegerField(source="trigger_attempts")
    lastTriggerError = serializers.CharField(source="last_trigger_error")
    receivedAt = serializers.DateTimeField(source="received_at")
    processedAt = serializers.DateTimeField(source="updated_at")
    uploadedAt = serializers.DateTimeField(source="uploaded_at", allow_null=True)

    class Meta:
        model = LeadList
        fields = [
            "id",
            "name",
            "fileName",
            "originalFileName",
            "source",
            "status",
            "recordCount",
            "county",
            "state",
            "notes",
            "downloadUrl",
            "sourceFileUrl",
            "errorMessage",
            "metadata",
            "triggerAttempts",
            "lastTriggerError",
            "receivedAt",
            "processedAt",
            "uploadedAt",
        ]
        read_only_fields = fields

    def get_status(self, obj) -> str:
        return to_list(obj.status).value

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["id"] = str(data["id"])
        # blank columns read back as absent
        for key in ("downloadUrl", "sourceFileUrl", "errorMessage", "lastTriggerError"):
            if not data.get(key):
                data[key] = None
        return data


class SubmissionSerializer(serializers.Serializer):
    # JSON submission: the file is already in the object store
    fileName = serializers.CharField(required=False, allow_blank=True, max_length=255)
    fileUrl = serializers.CharField(max_length=1000)
    county = serializers.CharField(max_length=120)
    state = serializers.CharField(max_length=64)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    originalFilename = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)

    def validate(self, attrs):
        for key in ("fileUrl", "county", "state"):
            attrs[key] = (attrs.get(key) or "").strip()
            if not attrs[key]:
                raise serializers.ValidationError({key: "This field may not be blank."})
        attrs["fileName"] = (attrs.get("fileName") or "").strip() or attrs["fileUrl"].rstrip("/").rsplit("/", 1)[-1]
        attrs["originalFilename"] = (attrs.get("originalFilename") or "").strip() or attrs["fileName"]
        attrs["notes"] = (attrs.get("notes") or "").strip()
        return attrs


class UploadSerializer(serializers.Serializer):
    # multipart submission: bytes go through this service
    file = serializers.FileField()
    county = serializers.CharField(max_length=120)
    state = serializers.CharField(max_length=64)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class CallbackSerializer(serializers.Serializer):
    record_id = serializers.CharField()
    status = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    clean_file_url = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=1000)
    record_count = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    error_message = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class LegacyRegistrationSerializer(serializers.Serializer):
    fileName = serializers.CharField(max_length=255)
    originalFileName = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    source = serializers.CharField(required=False, default="landportal", max_length=64)
    status = serializers.ChoiceField(choices=[ListStatus.INCOMING.value, ListStatus.READY.value], required=False, default=ListStatus.INCOMING.value)
    recordCount = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    county = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=120)
    state = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    downloadUrl = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=1000)
    metadata = serializers.DictField(required=False, allow_null=True)


class LegacyUpdateSerializer(serializers.Serializer):
    id = serializers.CharField()
    status = serializers.CharField(required=False)
    uploadedAt = serializers.DateTimeField(required=False, allow_null=True)


class DeleteSerializer(serializers.Serializer):
    id = serializers.CharField()
    cancel = serializers.BooleanField(required=False, default=False)
