from django.contrib import admin
from .models import Event, EventRSVP, Attendance

@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ('title', 'event_type', 'team', 'created_by', 'start_time', 'end_time')
    list_filter = ('event_type', 'team', 'start_time')
    search_fields = ('title', 'description', 'created_by__username')
    date_hierarchy = 'start_time'

@admin.register(EventRSVP)
class EventRSVPAdmin(admin.ModelAdmin):
    list_display = ('user', 'event', 'status', 'updated_at')
    list_filter = ('status', 'event__team')
    search_fields = ('user__username', 'event__title')

@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ('user', 'event', 'status', 'checked_in_at')
    list_filter = ('status', 'checked_in_at')
    search_fields = ('user__username', 'event__title')
