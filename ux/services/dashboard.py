# ux/services/dashboard.py

from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, Q, Sum

from core.models import DomainActivity
from core.serializers import DomainActivitySerializer
from events.datetime_utils import now, today
from events.models import Event, EventRSVP
from finances.models import Budget, FinanceRecord
from tasks.services import task_progress

UPCOMING_WINDOW = timedelta(days=7)
DEFAULT_UPCOMING_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 10


def budget_total(team) -> Decimal:
    """Annualized budget: monthly budgets count twelve times."""
    total = Decimal("0")
    for budget in Budget.objects.filter(team=team):
        if budget.period == Budget.PERIOD_MONTHLY:
            total += budget.amount * 12
        else:
            total += budget.amount
    return total


def get_dashboard_stats(ctx):
    current = now()
    team = ctx.team

    member_count = team.members.count()

    # 1️⃣ Events in the next week
    events_this_week = Event.objects.filter(
        team=team,
        start_time__gte=current,
        start_time__lte=current + UPCOMING_WINDOW,
    ).count()

    # 2️⃣ Tasks
    progress = task_progress(team)

    # 3️⃣ Spending against budget for the current year
    total_expenses = FinanceRecord.objects.filter(
        team=team,
        type=FinanceRecord.TYPE_EXPENSE,
        date__year=today().year,
    ).aggregate(total=Sum("amount"))["total"] or Decimal("0")

    return {
        "member_count": member_count,
        "events_this_week": events_this_week,
        "task_completion": progress["progress_percentage"],
        "tasks_completed": progress["completed"],
        "tasks_total": progress["total"],
        "total_expenses": total_expenses,
        "budget_total": budget_total(team),
    }


def get_upcoming_events(ctx, limit=DEFAULT_UPCOMING_LIMIT):
    events = (
        Event.objects.filter(team=ctx.team, start_time__gte=now())
        .annotate(going=Count("rsvps", filter=Q(rsvps__status=EventRSVP.STATUS_YES)))
        .order_by("start_time", "id")[:limit]
    )
    events = list(events)

    my_status = dict(
        EventRSVP.objects.filter(event__in=events, user=ctx.user)
        .values_list("event_id", "status")
    )

    return [
        {
            "id": e.id,
            "title": e.title,
            "event_type": e.event_type,
            "start_time": e.start_time,
            "end_time": e.end_time,
            "location": e.location,
            "rsvp_yes_count": e.going,
            "my_status": my_status.get(e.id),
        }
        for e in events
    ]


def get_recent_activity(ctx, since=None, limit=RECENT_ACTIVITY_LIMIT):
    qs = DomainActivity.objects.filter(team=ctx.team).select_related("actor")
    if since is not None:
        qs = qs.filter(timestamp__gt=since)
    return DomainActivitySerializer(qs[:limit], many=True).data


def get_dashboard(ctx, since=None):
    return {
        "stats": get_dashboard_stats(ctx),
        "upcoming_events": get_upcoming_events(ctx),
        "recent_activity": get_recent_activity(ctx, since=since),
    }
