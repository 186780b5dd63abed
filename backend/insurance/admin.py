from django.contrib import admin

from .models import InsurancePolicy


@admin.register(InsurancePolicy)
class InsurancePolicyAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "min_coverage", "max_coverage", "status")
    list_filter = ("status",)
