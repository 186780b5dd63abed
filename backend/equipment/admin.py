from django.contrib import admin

from .models import Equipment


@admin.register(Equipment)
class EquipmentAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "owner", "category", "price_per_day", "status")
    list_filter = ("category", "status")
    search_fields = ("title", "brand")
