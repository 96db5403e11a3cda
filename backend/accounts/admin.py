from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "phone_number", "role",
                    "department", "is_active")
    search_fields = ("username", "email", "phone_number")
    list_filter = ("is_active", "role", "department")
    filter_horizontal = ("groups", "user_permissions")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Complaints Access", {"fields": ("phone_number", "role", "department")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Complaints Access", {"fields": ("email", "phone_number", "role",
                                          "department")}),
    )
