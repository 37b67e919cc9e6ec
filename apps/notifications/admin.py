from django.contrib import admin  # type: ignore

from .models import EmailLog


@admin.register(EmailLog)
class EmailLogAdmin(admin.ModelAdmin):
    list_display = ("email_type", "recipient", "subject", "status", "sent_at", "created_at")
    list_filter = ("email_type", "status")
    search_fields = ("recipient", "subject")
    readonly_fields = ("created_at", "sent_at")
