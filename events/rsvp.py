# pitcrew-backend/events/rsvp.py
"""
RSVP and attendance operations.

An RSVP is the member's stated intent (yes / no / maybe); "no response" is
the absence of a row. Attendance is a separate check-in record.
"""
import logging

from django.db import IntegrityError, transaction

from .datetime_utils import now
from .models import Attendance, Event, EventRSVP

logger = logging.getLogger("pitcrew.events")


class CheckInNotAllowed(Exception):
    pass


def upsert_rsvp(ctx, event, status, comment=None):
    """
    Create or update the caller's RSVP. Any status may move to any other;
    repeating the same call leaves exactly one row.
    Returns (rsvp, created).
    """
    rsvp, created = EventRSVP.objects.update_or_create(
        event=event,
        user=ctx.user,
        defaults={"status": status, "comment": comment},
    )
    logger.info(f"RSVP {'created' if created else 'updated'}: user={ctx.user_id}, event={event.id}, status={status}")
    return rsvp, created


def clear_rsvp(ctx, event) -> bool:
    """Back to "no response". Returns True if a row was removed."""
    deleted, _ = EventRSVP.objects.filter(event=event, user=ctx.user).delete()
    return deleted > 0


def rsvp_summary(event, user=None) -> dict:
    counts = {choice: 0 for choice, _ in EventRSVP.STATUS_CHOICES}
    my_status = None
    for rsvp in event.rsvps.all():
        counts[rsvp.status] += 1
        if user is not None and rsvp.user_id == user.pk:
            my_status = rsvp.status

    return {
        "counts": counts,
        "total": sum(counts.values()),
        "my_status": my_status,
    }


def _require_practice(event):
    if event.event_type != Event.TYPE_PRACTICE:
        raise CheckInNotAllowed("Attendance can only be marked for practice events.")


def check_in(ctx, event, notes=None, status=Attendance.STATUS_PRESENT):
    """
    Check the caller in at a practice, present or late. Idempotent per
    (event, user): a repeated check-in returns the existing record.
    Returns (attendance, created).
    """
    _require_practice(event)

    existing = Attendance.objects.filter(event=event, user=ctx.user).first()
    if existing:
        return existing, False

    try:
        with transaction.atomic():
            record = Attendance.objects.create(
                event=event,
                user=ctx.user,
                status=status,
                checked_in_at=now(),
                notes=notes,
            )
    except IntegrityError:
        # Concurrent check-in from the same member won the insert
        return Attendance.objects.get(event=event, user=ctx.user), False

    logger.info(f"Attendance marked: user={ctx.user_id}, event={event.id}")
    return record, True


def mark_attendance(event, member, status, notes=None):
    """
    Organizer records or corrects a member's attendance. An existing
    check-in keeps its original checked_in_at.
    Returns (attendance, created).
    """
    _require_practice(event)
    with transaction.atomic():
        record = Attendance.objects.select_for_update().filter(event=event, user=member).first()
        created = record is None
        if created:
            record = Attendance.objects.create(
                event=event, user=member, status=status, notes=notes, checked_in_at=now(),
            )
        else:
            record.status = status
            record.notes = notes
            record.save(update_fields=["status", "notes"])
    logger.info(f"Attendance {'recorded' if created else 'updated'}: user={member.id}, event={event.id}, status={status}")
    return record, created


def attendance_for_event(event):
    return (
        Attendance.objects.filter(event=event)
        .select_related("user")
        .order_by("checked_in_at")
    )
