from django.contrib import admin

from .models import Complaint, ComplaintComment, ComplaintHistory, DailyReferenceCounter


class ReadOnlyAdminMixin:
    """
    Browse-only admin.  Complaints, their comments and the reference
    counters change only through the API services, which write the
    history, audit and notification rows alongside each change.
    """

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class ComplaintCommentInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = ComplaintComment
    extra = 0
    readonly_fields = ("author", "content", "is_internal", "created_at")


class ComplaintHistoryInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = ComplaintHistory
    extra = 0
    readonly_fields = ("action", "old_value", "new_value", "description",
                       "performed_by", "created_at")


@admin.register(Complaint)
class ComplaintAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("reference_number", "complaint_type", "status", "priority",
                    "department", "is_locked", "created_at")
    list_filter = ("status", "priority", "department", "is_locked")
    search_fields = ("reference_number", "complaint_type", "description")
    readonly_fields = ("reference_number", "citizen", "complaint_type", "location",
                       "description", "priority", "status", "department",
                       "assigned_employee", "is_locked", "locked_by", "locked_at",
                       "lock_expires_at", "resolved_at")
    inlines = [ComplaintCommentInline, ComplaintHistoryInline]


@admin.register(ComplaintComment)
class ComplaintCommentAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("complaint", "author", "is_internal", "created_at")
    list_filter = ("is_internal",)


@admin.register(DailyReferenceCounter)
class DailyReferenceCounterAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("day", "last_value")
