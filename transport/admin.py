from django.contrib import admin
from .models import Carpool, CarpoolRider


class CarpoolRiderInline(admin.TabularInline):
    model = CarpoolRider
    extra = 0


@admin.register(Carpool)
class CarpoolAdmin(admin.ModelAdmin):
    list_display = ('driver', 'team', 'event', 'departure_location', 'departure_time', 'available_seats')
    list_filter = ('team', 'departure_time')
    search_fields = ('driver__username', 'departure_location')
    inlines = [CarpoolRiderInline]
