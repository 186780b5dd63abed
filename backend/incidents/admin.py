from django.contrib import admin

from .models import Incident


@admin.register(Incident)
class IncidentAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "type", "severity", "status", "resolution_amount", "created_at")
    list_filter = ("type", "severity", "status")
    search_fields = ("description", "booking__id", "reporter__username")
    raw_id_fields = ("booking", "reporter", "resolved_by")
