from rest_framework.decorators import api_view, parser_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from landhud.common.responses import error_response, not_found, structured_errors, validation_error
from landhud.leadlists import reconciliation, services, store
from landhud.leadlists.serializers import (
    CallbackSerializer,
    DeleteSerializer,
    LeadListSerializer,
    LegacyRegistrationSerializer,
    LegacyUpdateSerializer,
    SubmissionSerializer,
    UploadSerializer,
)
from landhud.leadlists.statuses import parse_list_status


def _service_error(e: services.LeadListError) -> Response:
    return error_response(e.code, e.message, e.status, details=e.details)


def _limit(request, default=100, ceiling=500):
    try:
        limit = int(request.query_params.get("limit") or default)
    except Exception:
        limit = default
    return max(1, min(ceiling, limit))


def _list_response(request) -> Response:
    status = (request.query_params.get("status") or "").strip() or None
    if status and parse_list_status(status) is None:
        return validation_error({"status": [f"Unknown status {status!r}"]})

    items = reconciliation.reconciled_lists(
        status=status,
        county=(request.query_params.get("county") or "").strip() or None,
        state=(request.query_params.get("state") or "").strip() or None,
        q=(request.query_params.get("q") or "").strip() or None,
        limit=_limit(request),
    )
    return Response({"success": True, "lists": items, "count": len(items)})


@api_view(["GET"])
@structured_errors
def lead_lists(request):
    """
    GET /v1/lead-lists
    Query: status, county, state, q, limit (default 100, max 500)

    Durable records merged with the legacy cache, newest first.
    """
    return _list_response(request)


@api_view(["POST"])
@parser_classes([JSONParser, MultiPartParser, FormParser])
@structured_errors
def lead_list_upload(request):
    """
    POST /v1/lead-lists/upload

    JSON (file already in storage):
      {"fileName", "fileUrl", "county", "state", "notes"?, "originalFilename"?}
    multipart:
      file, county, state, notes?

    Response 201:
      {"success": true, "recordId", "fileName", "fileUrl", "message"}
    """
    try:
        if "file" in request.FILES:
            s = UploadSerializer(data=request.data)
            if not s.is_valid():
                return validation_error(s.errors)
            record = services.upload_and_submit(
                upload=s.validated_data["file"],
                county=s.validated_data["county"],
                state=s.validated_data["state"],
                notes=s.validated_data.get("notes") or "",
            )
        else:
            s = SubmissionSerializer(data=request.data)
            if not s.is_valid():
                return validation_error(s.errors)
            data = s.validated_data
            record = services.submit_lead_list(
                file_name=data["fileName"],
                file_url=data["fileUrl"],
                county=data["county"],
                state=data["state"],
                notes=data["notes"],
                original_filename=data["originalFilename"],
            )
    except services.LeadListError as e:
        return _service_error(e)

    return Response(
        {
            "success": True,
            "recordId": str(record.id),
            "fileName": record.file_name,
            "fileUrl": record.source_file_url,
            "message": "File uploaded successfully. Processing started.",
        },
        status=201,
    )


@api_view(["GET"])
@structured_errors
def lead_list_status(request):
    """
    GET /v1/lead-lists/status?id=<uuid>
    Polled by the upload page until the list is ready or errored.
    """
    list_id = (request.query_params.get("id") or "").strip()
    if not list_id:
        return validation_error({"id": ["Record ID is required"]})

    record = store.get(list_id)
    if not record:
        return not_found()

    return Response({"success": True, "record": LeadListSerializer(record).data})


@api_view(["GET", "POST", "PATCH"])
@structured_errors
def lead_list_webhook(request):
    """
    POST  /v1/lead-lists/webhook
      with record_id -> scrubbing workflow callback
        {"record_id", "status", "clean_file_url"?, "record_count"?, "error_message"?}
      without record_id -> legacy registration
        {"fileName", "originalFileName"?, "source"?, "status"?, "recordCount"?, ...}
    PATCH /v1/lead-lists/webhook   legacy update {"id", "status"?, "uploadedAt"?}
    GET   /v1/lead-lists/webhook   legacy listing (reconciled)
    """
    if request.method == "GET":
        return _list_response(request)

    if not isinstance(request.data, dict):
        return validation_error({"body": ["Expected a JSON object"]})

    try:
        if request.method == "PATCH":
            s = LegacyUpdateSerializer(data=request.data)
            if not s.is_valid():
                return validation_error(s.errors)
            entry = services.legacy_update(
                list_id=s.validated_data["id"],
                status=s.validated_data.get("status"),
                uploaded_at=s.validated_data.get("uploadedAt"),
            )
            return Response({"success": True, "list": entry})

        if "record_id" in request.data:
            s = CallbackSerializer(data=request.data)
            if not s.is_valid():
                return validation_error(s.errors)
            record = services.apply_callback(**s.validated_data)
            return Response({"success": True, "record": LeadListSerializer(record).data})

        s = LegacyRegistrationSerializer(data=request.data)
        if not s.is_valid():
            return validation_error(s.errors)
        entry = services.register_legacy(s.validated_data)
    except services.LeadListError as e:
        return _service_error(e)

    return Response(
        {
            "success": True,
            "id": entry["id"],
            "message": "Lead list registered successfully",
            "list": entry,
        },
        status=201,
    )


@api_view(["DELETE", "POST"])
@structured_errors
def lead_list_delete(request):
    """
    DELETE /v1/lead-lists/delete  {"id", "cancel"?: bool}
    """
    s = DeleteSerializer(data=request.data)
    if not s.is_valid():
        return validation_error(s.errors)

    try:
        cancelled = services.delete_lead_list(s.validated_data["id"], cancel=s.validated_data["cancel"])
    except services.LeadListError as e:
        return _service_error(e)

    return Response(
        {
            "success": True,
            "message": "Scrubbing cancelled and record deleted" if cancelled else "Record deleted successfully",
        }
    )


@api_view(["POST"])
@structured_errors
def lead_list_mark_uploaded(request, list_id):
    """
    POST /v1/lead-lists/{id}/mark-uploaded
    """
    try:
        record = services.mark_uploaded(list_id)
    except services.LeadListError as e:
        return _service_error(e)
    return Response({"success": True, "record": LeadListSerializer(record).data})


@api_view(["POST"])
@structured_errors
def lead_list_retrigger(request, list_id):
    """
    POST /v1/lead-lists/{id}/retrigger
    Re-send the scrubbing trigger for a list stuck in incoming.
    """
    try:
        record = services.retrigger(list_id)
    except services.LeadListError as e:
        return _service_error(e)
    return Response({"success": True, "record": LeadListSerializer(record).data}, status=202)
