from django.contrib import admin
from landhud.leadlists.models import LeadList


@admin.register(LeadList)
class LeadListAdmin(admin.ModelAdmin):
    list_display = ("id", "file_name", "county", "state", "status", "record_count", "received_at", "updated_at")
    search_fields = ("file_name", "original_file_name", "county", "state")
    list_filter = ("status", "state", "received_at")
