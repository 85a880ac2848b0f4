from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = (
        "email",
        "first_name",
        "last_name",
        "role",
        "is_approved",
        "savings_category",
    )

    list_filter = ("role", "is_approved", "savings_category")
    search_fields = ("email", "first_name", "last_name")
