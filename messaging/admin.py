from django.contrib import admin
from .models import Message, Mention


class MentionInline(admin.TabularInline):
    model = Mention
    extra = 0


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('user', 'team', 'message_type', 'is_pinned', 'created_at')
    list_filter = ('message_type', 'is_pinned', 'team')
    search_fields = ('content', 'user__username')
    inlines = [MentionInline]
