from django.contrib import admin

from .models import User, Identity, OauthContact


# -------------------------
# Inline helpers
# -------------------------
class IdentityInline(admin.TabularInline):
    model = Identity
    fields = ("provider", "uid", "nickname", "created_at")
    readonly_fields = ("created_at",)
    extra = 0
    show_change_link = True


# -------------------------
# User admin
# -------------------------
@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "github_login", "display_name", "is_admin", "is_member", "is_prospect", "created_at")
    search_fields = ("email", "display_name", "github_login")
    readonly_fields = ("session_token", "created_at", "updated_at", "last_login")
    exclude = ("password",)
    list_filter = ("is_admin", "is_member", "is_prospect", "is_active")
    inlines = (IdentityInline,)
    ordering = ("-created_at",)

    actions = ["mark_members", "mark_prospects"]

    def mark_members(self, request, queryset):
        updated = queryset.update(is_member=True, is_prospect=False)
        self.message_user(request, f"Marked {updated} users as members")
    mark_members.short_description = "Mark selected users as members"

    def mark_prospects(self, request, queryset):
        updated = queryset.update(is_prospect=True)
        self.message_user(request, f"Marked {updated} users as prospects")
    mark_prospects.short_description = "Mark selected users as prospects"

    def delete_model(self, request, obj):
        obj.destroy()


@admin.register(Identity)
class IdentityAdmin(admin.ModelAdmin):
    list_display = ("id", "user_email", "provider", "uid", "nickname", "created_at")
    search_fields = ("user__email", "uid", "nickname")
    list_filter = ("provider",)
    exclude = ("oauth_token", "oauth_secret")

    def user_email(self, obj):
        return obj.user.email if obj.user else None
    user_email.short_description = "user"


@admin.register(OauthContact)
class OauthContactAdmin(admin.ModelAdmin):
    list_display = ("user_email", "provider", "name", "handle")
    search_fields = ("user__email", "name", "handle")
    list_filter = ("provider",)

    def user_email(self, obj):
        return obj.user.email if obj.user else None
