from django.contrib import admin

from .models import AuditLog, Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "recipient", "type", "title", "complaint", "created_at")
    list_filter = ("type",)
    search_fields = ("title", "message")
    readonly_fields = ("recipient", "complaint", "type", "title", "message", "created_at")


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "entity", "entity_id", "user")
    list_filter = ("action", "entity")
    search_fields = ("entity_id",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
