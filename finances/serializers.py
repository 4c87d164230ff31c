from rest_framework import serializers

from core.sanitizers import sanitize_text
from .models import Budget, FinanceRecord


class FinanceRecordSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source="created_by.display_name", read_only=True)
    display_category = serializers.CharField(read_only=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)

    class Meta:
        model = FinanceRecord
        fields = [
            "id",
            "type",
            "amount",
            "description",
            "category",
            "income_source",
            "expense_category",
            "display_category",
            "date",
            "receipt_url",
            "created_by",
            "created_by_name",
            "created_at",
        ]
        read_only_fields = ["id", "created_by", "created_by_name", "display_category", "created_at"]

    def validate_description(self, value):
        value = sanitize_text(value, max_length=255)
        if not value:
            raise serializers.ValidationError("Description is required.")
        return value

    def validate(self, attrs):
        # The form only sends "category"; mirror it into the typed column
        record_type = attrs.get("type") or getattr(self.instance, "type", None)
        category = attrs.get("category")
        if category:
            if record_type == FinanceRecord.TYPE_EXPENSE and not attrs.get("expense_category"):
                attrs["expense_category"] = category
            elif record_type == FinanceRecord.TYPE_INCOME and not attrs.get("income_source"):
                attrs["income_source"] = category
        return attrs


class BudgetSerializer(serializers.ModelSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    spent = serializers.SerializerMethodField()
    remaining = serializers.SerializerMethodField()
    percent_used = serializers.SerializerMethodField()

    class Meta:
        model = Budget
        fields = ["id", "category", "amount", "period", "spent", "remaining", "percent_used", "created_at"]
        read_only_fields = ["id", "spent", "remaining", "percent_used", "created_at"]

    def _spent(self, obj):
        spent_map = self.context.get("spent", {})
        return spent_map.get(obj.id)

    def get_spent(self, obj):
        return str(self._spent(obj) or 0)

    def get_remaining(self, obj):
        spent = self._spent(obj) or 0
        return str(obj.amount - spent)

    def get_percent_used(self, obj):
        spent = self._spent(obj) or 0
        if not obj.amount:
            return 0
        return round(float(spent) / float(obj.amount) * 100, 1)

    def validate_category(self, value):
        value = sanitize_text(value, max_length=64)
        if not value:
            raise serializers.ValidationError("Category is required.")
        return value

    def validate(self, attrs):
        team = self.context.get("team")
        category = attrs.get("category", getattr(self.instance, "category", None))
        period = attrs.get("period", getattr(self.instance, "period", Budget.PERIOD_YEARLY))
        if team is not None:
            clash = Budget.objects.filter(team=team, category=category, period=period)
            if self.instance is not None:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise serializers.ValidationError(
                    {"category": f"A {period} budget for '{category}' already exists."}
                )
        return attrs
