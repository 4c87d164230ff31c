from django.contrib import admin
from .models import Team, DomainActivity

@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('team_number', 'name', 'program', 'first_region', 'invite_code', 'created_at')
    search_fields = ('name', 'team_number', 'invite_code')
    list_filter = ('program', 'created_at')

@admin.register(DomainActivity)
class DomainActivityAdmin(admin.ModelAdmin):
    list_display = ('team', 'verb', 'actor', 'timestamp')
    list_filter = ('verb', 'team')
    search_fields = ('verb', 'actor__username')
    readonly_fields = ('team', 'actor', 'verb', 'content_type', 'object_id', 'metadata', 'timestamp')
