from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Marketplace", {"fields": ("phone", "avatar_url", "can_rent", "can_list")}),
    )
    list_display = ("username", "email", "phone", "can_rent", "can_list", "is_staff")
