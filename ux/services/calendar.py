# ux/services/calendar.py
"""
Unified team calendar: events, due-dated tasks and the season's official
competitions projected into one list of CalendarItems, then filtered by
type, member and viewing window.

Each section is fetched independently. A failing section is logged and
reported in `warnings`; the others are still returned.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from django.db import DatabaseError
from django.db.models import Prefetch

from competitions.clients import CompetitionAPIError, fetch_season_events
from events.datetime_utils import as_aware, calendar_window, now, parse_iso, today
from events.models import Event, EventRSVP
from tasks.models import Task

logger = logging.getLogger("pitcrew.calendar")

KIND_EVENT = "event"
KIND_TASK = "task"
KIND_COMPETITION = "competition"

TYPE_ALL = "all"
TYPE_FILTERS = (KIND_EVENT, KIND_TASK, KIND_COMPETITION, TYPE_ALL)

TASK_TITLE_PREFIX = "📋 "

# RSVP answers that count as taking part
PARTICIPATING_STATUSES = (EventRSVP.STATUS_YES, EventRSVP.STATUS_MAYBE)

DEADLINE_HORIZON = timedelta(days=7)


@dataclass
class CalendarItem:
    id: str
    title: str
    start: datetime
    end: datetime
    kind: str
    source_category: str
    owner_id: Optional[int] = None
    participant_count: int = 0
    extras: dict = field(default_factory=dict)
    involved_user_ids: frozenset = frozenset()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "kind": self.kind,
            "source_category": self.source_category,
            "owner_id": self.owner_id,
            "participant_count": self.participant_count,
            **self.extras,
        }


@dataclass
class CalendarQuery:
    type_filter: str = TYPE_ALL
    member_id: Optional[int] = None
    view: Optional[str] = None
    anchor: Optional[object] = None
    ordered: bool = True
    include_external: bool = True

    @property
    def season(self) -> int:
        return (self.anchor or today()).year

    def wants(self, kind) -> bool:
        if self.type_filter == TYPE_ALL:
            return True
        if self.type_filter == KIND_COMPETITION:
            # competition-typed team events live in the event section
            return kind in (KIND_COMPETITION, KIND_EVENT)
        return self.type_filter == kind


# -----------------------------
# Projection
# -----------------------------
def project_event(event) -> CalendarItem:
    rsvps = list(event.rsvps.all())
    going = [r for r in rsvps if r.status == EventRSVP.STATUS_YES]
    involved = {r.user_id for r in rsvps if r.status in PARTICIPATING_STATUSES}
    if event.created_by_id:
        involved.add(event.created_by_id)

    return CalendarItem(
        id=f"event-{event.id}",
        title=event.title,
        start=event.start_time,
        end=event.end_time,
        kind=KIND_EVENT,
        source_category=event.event_type,
        owner_id=event.created_by_id,
        participant_count=len(going),
        extras={
            "event_id": event.id,
            "description": event.description,
            "location": event.location,
            "is_recurring": event.is_recurring,
            "rsvp_enabled": True,
            "check_in_enabled": event.event_type == Event.TYPE_PRACTICE,
        },
        involved_user_ids=frozenset(involved),
    )


def project_task(task) -> CalendarItem:
    involved = {uid for uid in (task.assigned_to_id, task.created_by_id) if uid}
    return CalendarItem(
        id=f"task-{task.id}",
        title=f"{TASK_TITLE_PREFIX}{task.title}",
        start=task.due_date,
        end=task.due_date,
        kind=KIND_TASK,
        source_category=KIND_TASK,
        owner_id=task.assigned_to_id or task.created_by_id,
        participant_count=1 if task.assigned_to_id else 0,
        extras={
            "task_id": task.id,
            "description": task.description,
            "status": task.status,
            "priority": task.priority,
            "assigned_to": task.assigned_to_id,
        },
        involved_user_ids=frozenset(involved),
    )


def project_competition(raw: dict, program: str) -> Optional[CalendarItem]:
    """
    Official event from a FIRST schedule API. Returns None when the record
    has no usable start date, since it cannot be placed on a calendar.
    """
    start = as_aware(parse_iso(raw.get("dateStart") or ""))
    if start is None:
        return None
    end = as_aware(parse_iso(raw.get("dateEnd") or "")) or start
    if end < start:
        end = start

    code = raw.get("code") or ""
    location = raw.get("venue") or raw.get("address") or raw.get("city")
    return CalendarItem(
        id=f"competition-{program}-{code}",
        title=raw.get("name") or code,
        start=start,
        end=end,
        kind=KIND_COMPETITION,
        source_category=KIND_COMPETITION,
        extras={
            "program": program,
            "code": code,
            "competition_type": raw.get("typeName") or raw.get("type"),
            "location": location,
            "district": raw.get("districtCode") or raw.get("regionCode"),
            "website": raw.get("website"),
        },
    )


# -----------------------------
# Filters
# -----------------------------
def matches_type(item: CalendarItem, type_filter: str) -> bool:
    if type_filter in (None, "", TYPE_ALL):
        return True
    if item.kind == type_filter:
        return True
    return (
        type_filter == KIND_COMPETITION
        and item.kind == KIND_EVENT
        and item.source_category == Event.TYPE_COMPETITION
    )


def involves(item: CalendarItem, user_id) -> bool:
    """
    Creator, assignee, task creator or a yes/maybe RSVP. Official
    competitions involve nobody.
    """
    return user_id in item.involved_user_ids


def in_window(item: CalendarItem, window_start, window_end) -> bool:
    """Overlap with [window_start, window_end); point items count at their start."""
    if item.start >= window_end:
        return False
    return item.end > window_start or item.start >= window_start


def apply_filters(items: List[CalendarItem], query: CalendarQuery, window=None) -> List[CalendarItem]:
    result = [item for item in items if matches_type(item, query.type_filter)]
    if query.member_id is not None:
        result = [item for item in result if involves(item, query.member_id)]
    if window is not None:
        result = [item for item in result if in_window(item, *window)]
    if query.ordered:
        # sorted() is stable, so same-start items keep arrival order
        result = sorted(result, key=lambda item: item.start)
    return result


# -----------------------------
# Sections
# -----------------------------
def team_events(ctx) -> list:
    return list(
        Event.objects.filter(team=ctx.team)
        .prefetch_related(Prefetch("rsvps", queryset=EventRSVP.objects.only("id", "event_id", "user_id", "status")))
        .order_by("start_time", "id")
    )


def team_due_tasks(ctx) -> list:
    return list(
        Task.objects.filter(team=ctx.team, due_date__isnull=False).order_by("due_date", "id")
    )


def season_competitions(ctx, season, fetcher) -> List[CalendarItem]:
    program = ctx.team.program
    items = []
    for raw in fetcher(program, season):
        item = project_competition(raw, program)
        if item is not None:
            items.append(item)
    return items


def competition_warning(ctx) -> dict:
    return {
        "section": "competitions",
        "message": f"Failed to fetch {ctx.team.program.upper()} competitions",
    }


def calendar_stats(events, tasks, current=None) -> dict:
    current = current or now()
    horizon = current + DEADLINE_HORIZON

    upcoming_deadlines = [t for t in tasks if current <= t.due_date <= horizon]
    next_competition = next(
        (e for e in events if e.event_type == Event.TYPE_COMPETITION and e.start_time > current),
        None,
    )
    return {
        "total_events": len(events),
        "total_tasks": len(tasks),
        "upcoming_deadlines": len(upcoming_deadlines),
        "next_competition": (
            {"id": next_competition.id, "title": next_competition.title, "start": next_competition.start_time.isoformat()}
            if next_competition else None
        ),
    }


def build_calendar(ctx, query: CalendarQuery, fetcher: Optional[Callable] = None) -> dict:
    """
    Assemble the calendar for ctx.team. Never raises for a single failing
    section; see `warnings` in the result.
    """
    fetcher = fetcher or fetch_season_events
    warnings = []
    events, tasks, competitions = [], [], []

    if query.wants(KIND_EVENT):
        try:
            events = team_events(ctx)
        except DatabaseError as e:
            logger.error(f"Calendar: failed to load events for team {ctx.team_id}: {e}")
            warnings.append({"section": "events", "message": "Failed to load events"})

    if query.wants(KIND_TASK):
        try:
            tasks = team_due_tasks(ctx)
        except DatabaseError as e:
            logger.error(f"Calendar: failed to load tasks for team {ctx.team_id}: {e}")
            warnings.append({"section": "tasks", "message": "Failed to load tasks"})

    # Member-filtered views can never contain official competitions
    if query.wants(KIND_COMPETITION) and query.include_external and query.member_id is None:
        try:
            competitions = season_competitions(ctx, query.season, fetcher)
        except CompetitionAPIError as e:
            logger.warning(f"Calendar: competition schedule unavailable for team {ctx.team_id}: {e}")
            warnings.append(competition_warning(ctx))
        except Exception:
            logger.exception(f"Calendar: could not project competitions for team {ctx.team_id}")
            warnings.append(competition_warning(ctx))

    # Arrival order: events, tasks, competitions
    items = [project_event(e) for e in events]
    items += [project_task(t) for t in tasks]
    items += competitions

    window = None
    if query.view:
        window = calendar_window(query.view, query.anchor or today())

    visible = apply_filters(items, query, window)

    return {
        "items": [item.to_dict() for item in visible],
        "count": len(visible),
        "warnings": warnings,
        "stats": calendar_stats(events, tasks),
        "window": (
            {"view": query.view, "start": window[0].isoformat(), "end": window[1].isoformat()}
            if window else None
        ),
    }
