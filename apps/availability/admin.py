from django.contrib import admin  # type: ignore

from .models import Availability


@admin.register(Availability)
class AvailabilityAdmin(admin.ModelAdmin):
    list_display = ("destination", "date", "available_slots", "booked_slots", "is_blocked")
    list_filter = ("is_blocked", "destination")
    date_hierarchy = "date"
