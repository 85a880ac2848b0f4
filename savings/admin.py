from django.contrib import admin
from .models import MemberSavingsTarget, Quarter


@admin.register(Quarter)
class QuarterAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "year",
        "quarter_number",
        "start_date",
        "end_date",
        "status",
        "shareout_activated",
    )
    list_filter = ("status", "year")


@admin.register(MemberSavingsTarget)
class MemberSavingsTargetAdmin(admin.ModelAdmin):
    list_display = ("user", "quarter", "monthly_target", "updated_at")
    list_filter = ("quarter",)
    search_fields = ("user__email",)
