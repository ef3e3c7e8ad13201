from django.urls import path

from landhud.leadlists.api import (
    lead_lists,
    lead_list_upload,
    lead_list_status,
    lead_list_webhook,
    lead_list_delete,
    lead_list_mark_uploaded,
    lead_list_retrigger,
)

urlpatterns = [
    path("lead-lists", lead_lists, name="lead-lists"),
    path("lead-lists/upload", lead_list_upload, name="lead-lists-upload"),
    path("lead-lists/status", lead_list_status, name="lead-lists-status"),
    path("lead-lists/webhook", lead_list_webhook, name="lead-lists-webhook"),
    path("lead-lists/delete", lead_list_delete, name="lead-lists-delete"),
    path("lead-lists/<uuid:list_id>/mark-uploaded", lead_list_mark_uploaded, name="lead-lists-mark-uploaded"),
    path("lead-lists/<uuid:list_id>/retrigger", lead_list_retrigger, name="lead-lists-retrigger"),
]
