# audit/admin.py
from django.contrib import admin
from .models import AuditLog

@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("id", "timestamp", "action", "actor", "resource_id", "source_ip")
    list_filter = ("action",)
    search_fields = ("resource_id", "source_ip")
    readonly_fields = ("actor", "action", "timestamp", "source_ip", "user_agent", "resource_id", "details")

    # append-only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
