"""Stampcard admin."""

from django.contrib import admin
from django.utils.html import format_html

from stampcard.conf import stampcard_settings
from stampcard.models import Account


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = [
        "username",
        "stamps",
        "rewards",
        "stamps_progress",
        "created_at",
    ]
    search_fields = ["username"]
    ordering = ["-stamps", "username"]
    # Counters change only through LedgerService; the hash is never edited here
    readonly_fields = ["username", "credential_hash", "stamps", "rewards", "created_at", "updated_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def stamps_progress(self, obj):
        target = stampcard_settings.STAMPS_FOR_REWARD
        if obj.stamps >= target:
            return format_html('<span style="color:green">{}/{} ✓</span>', obj.stamps, target)
        return format_html("{}/{}", obj.stamps, target)

    stamps_progress.short_description = "Progress"
