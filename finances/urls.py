from django.urls import path
from .views import (
    BudgetDetailView,
    BudgetListCreateView,
    FinanceRecordDetailView,
    FinanceRecordListCreateView,
    FinanceSummaryView,
    ReceiptUploadView,
)

urlpatterns = [
    path("records/", FinanceRecordListCreateView.as_view(), name="finance-record-list"),
    path("records/<int:pk>/", FinanceRecordDetailView.as_view(), name="finance-record-detail"),
    path("summary/", FinanceSummaryView.as_view(), name="finance-summary"),
    path("budgets/", BudgetListCreateView.as_view(), name="budget-list"),
    path("budgets/<int:pk>/", BudgetDetailView.as_view(), name="budget-detail"),
    path("receipts/", ReceiptUploadView.as_view(), name="receipt-upload"),
]
