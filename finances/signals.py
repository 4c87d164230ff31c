from django.db.models.signals import post_save
from django.dispatch import receiver

from core.constants import ACTIVITY_EXPENSE_ADDED, ACTIVITY_INCOME_ADDED
from core.services import ActivityService
from .models import FinanceRecord


@receiver(post_save, sender=FinanceRecord)
def log_finance_activity(sender, instance, created, **kwargs):
    if not created:
        return
    ActivityService.safe_log_activity(
        actor=instance.created_by,
        verb=ACTIVITY_INCOME_ADDED if instance.type == FinanceRecord.TYPE_INCOME else ACTIVITY_EXPENSE_ADDED,
        target=instance,
        team=instance.team,
        metadata={
            'description': instance.description,
            'amount': str(instance.amount),
            'category': instance.display_category,
        }
    )
