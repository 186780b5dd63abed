from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "equipment",
        "renter",
        "owner",
        "status",
        "start_date",
        "end_date",
        "total_price",
    )
    list_filter = ("status",)
    search_fields = ("id", "equipment__title", "renter__username", "owner__username")
    raw_id_fields = ("equipment", "renter", "owner", "insurance")
    readonly_fields = ("created_at", "updated_at")
