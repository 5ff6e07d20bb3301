from django.contrib import admin

from .models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "author", "recipient", "subject", "created_at")
    search_fields = ("subject", "body", "author__email")
    readonly_fields = ("created_at", "updated_at")
