from django.contrib import admin

from .models import Project, UserProject, Connection, PaymentApproval


class UserProjectInline(admin.TabularInline):
    model = UserProject
    fields = ("user", "role", "created_at")
    readonly_fields = ("created_at",)
    extra = 0


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "creator_email", "box_api_doc_id", "created_at")
    search_fields = ("title", "creator__email")
    readonly_fields = ("box_api_doc_id", "created_at", "updated_at")
    inlines = (UserProjectInline,)

    def creator_email(self, obj):
        return obj.creator.email if obj.creator else None
    creator_email.short_description = "creator"


@admin.register(Connection)
class ConnectionAdmin(admin.ModelAdmin):
    list_display = ("user", "project", "type_of", "created_at")
    list_filter = ("type_of",)
    search_fields = ("user__email", "project__title")


@admin.register(PaymentApproval)
class PaymentApprovalAdmin(admin.ModelAdmin):
    list_display = ("backer", "project", "amount_cents", "state", "created_at")
    list_filter = ("state",)
    search_fields = ("backer__email", "project__title", "preapproval_id")
    readonly_fields = ("created_at", "updated_at")
