from django.contrib import admin
from .models import FinanceRecord, Budget

@admin.register(FinanceRecord)
class FinanceRecordAdmin(admin.ModelAdmin):
    list_display = ('description', 'type', 'amount', 'team', 'date', 'created_by')
    list_filter = ('type', 'team', 'date')
    search_fields = ('description', 'category', 'expense_category', 'income_source')
    date_hierarchy = 'date'

@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ('category', 'period', 'amount', 'team')
    list_filter = ('period', 'team')
