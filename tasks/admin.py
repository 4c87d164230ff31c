from django.contrib import admin
from .models import Task

@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('title', 'status', 'priority', 'team', 'assigned_to', 'due_date')
    list_filter = ('status', 'priority', 'team')
    search_fields = ('title', 'description', 'assigned_to__username')
