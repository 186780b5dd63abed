from django.contrib import admin

from .models import Payment, Payout


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "amount", "status", "ref", "external_txn_id", "created_at")
    list_filter = ("status", "method")
    search_fields = ("ref", "content", "external_txn_id")
    raw_id_fields = ("booking", "renter", "owner")


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "owner", "amount", "status", "created_at")
    list_filter = ("status",)
    raw_id_fields = ("booking", "owner", "incident")
