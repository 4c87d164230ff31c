from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User

@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'role', 'team', 'first_name', 'last_name', 'is_staff')
    list_filter = ('role', 'team', 'is_staff', 'is_superuser', 'is_active')
    search_fields = ('username', 'email', 'first_name', 'last_name')
    fieldsets = UserAdmin.fieldsets + (
        ('Team Profile', {'fields': ('team', 'role', 'phone', 'avatar_url', 'dietary_restrictions', 'emergency_contact', 'expertise')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Team Profile', {'fields': ('role', 'phone')}),
    )
