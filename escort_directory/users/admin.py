from django.contrib import admin
from django.contrib.auth import admin as auth_admin
from django.utils.translation import gettext_lazy as _

from escort_directory.users.models import User


@admin.register(User)
class UserAdmin(auth_admin.UserAdmin):
    fieldsets = (
        *auth_admin.UserAdmin.fieldsets,
        (_("Presence"), {"fields": ("is_online", "last_active")}),
    )
    list_display = ["username", "email", "name", "is_online", "last_active"]
    list_filter = ["is_online", "is_staff", "is_active"]
    search_fields = ["username", "email", "name"]
    readonly_fields = ["is_online", "last_active"]
