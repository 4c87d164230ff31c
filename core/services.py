import logging

from django.contrib.contenttypes.models import ContentType
from django.db import transaction

from .models import DomainActivity

logger = logging.getLogger("pitcrew.core")


class ActivityService:
    @staticmethod
    def log_activity(actor, verb, target, team=None, metadata=None):
        """
        Logs a team activity. The team defaults to target.team.
        """
        if metadata is None:
            metadata = {}

        team = team or getattr(target, "team", None)
        if team is None:
            logger.debug(f"Skipping activity {verb}: no team on {target!r}")
            return None

        # Create the immutable record
        return DomainActivity.objects.create(
            team=team,
            actor=actor,
            verb=verb,
            content_type=ContentType.objects.get_for_model(target),
            object_id=target.pk,
            metadata=metadata,
        )

    @staticmethod
    def safe_log_activity(*args, **kwargs):
        """
        Same as log_activity, but a ledger failure is logged and swallowed
        so it never breaks the primary write.
        """
        try:
            with transaction.atomic():
                return ActivityService.log_activity(*args, **kwargs)
        except Exception as e:
            logger.warning(f"Failed to log activity {kwargs.get('verb') or args[1:2]}: {e}")
            return None
