# pitcrew-backend/finances/models.py
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


OTHER_CATEGORY = "Other"
WORK_HOURS_CATEGORY = "Work Hours"


class FinanceRecord(models.Model):
    TYPE_INCOME = "income"
    TYPE_EXPENSE = "expense"

    TYPE_CHOICES = [
        (TYPE_INCOME, "Income"),
        (TYPE_EXPENSE, "Expense"),
    ]

    team = models.ForeignKey(
        "core.Team",
        on_delete=models.CASCADE,
        related_name="finance_records",
    )
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    description = models.CharField(max_length=255)

    # Free-form labels; see display_category for precedence
    category = models.CharField(max_length=64, blank=True, null=True)
    income_source = models.CharField(max_length=64, blank=True, null=True)
    expense_category = models.CharField(max_length=64, blank=True, null=True)

    date = models.DateField()
    receipt_url = models.CharField(max_length=1024, blank=True, null=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="finance_records",
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["team", "date"], name="finance_team_date_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.amount} - {self.description}"

    @property
    def display_category(self) -> str:
        return self.category or self.expense_category or self.income_source or OTHER_CATEGORY


class Budget(models.Model):
    PERIOD_MONTHLY = "monthly"
    PERIOD_YEARLY = "yearly"

    PERIOD_CHOICES = [
        (PERIOD_MONTHLY, "Monthly"),
        (PERIOD_YEARLY, "Yearly"),
    ]

    team = models.ForeignKey(
        "core.Team",
        on_delete=models.CASCADE,
        related_name="budgets",
    )
    category = models.CharField(max_length=64)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    period = models.CharField(max_length=16, choices=PERIOD_CHOICES, default=PERIOD_YEARLY)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="budgets",
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category"]
        constraints = [
            models.UniqueConstraint(fields=["team", "category", "period"], name="unique_team_budget_category"),
        ]

    def __str__(self):
        return f"{self.category} ({self.period}): {self.amount}"
