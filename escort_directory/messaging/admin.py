from django.contrib import admin

from escort_directory.messaging import models


@admin.register(models.Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ["id", "sender", "recipient", "message_type", "is_read", "created_at"]
    search_fields = ["content", "sender__username", "recipient__username"]
    list_filter = ["message_type", "is_read", "created_at"]
    readonly_fields = ["created_at", "updated_at", "read_at"]
