# core/constants.py

# --- Activity Verbs (Standard Registry) ---

# Team membership
ACTIVITY_TEAM_CREATED = "team.created"
ACTIVITY_MEMBER_JOINED = "team.joined"
ACTIVITY_MEMBER_LEFT = "team.left"

# Calendar
ACTIVITY_EVENT_SCHEDULED = "event.scheduled"
ACTIVITY_EVENT_UPDATED = "event.updated"
ACTIVITY_RSVP_UPDATED = "event.rsvp"
ACTIVITY_ATTENDANCE_MARKED = "attendance.marked"

# Tasks
ACTIVITY_TASK_CREATED = "task.created"
ACTIVITY_TASK_COMPLETED = "task.completed"
ACTIVITY_TASK_REOPENED = "task.reopened"

# Finances
ACTIVITY_EXPENSE_ADDED = "finance.expense_added"
ACTIVITY_INCOME_ADDED = "finance.income_added"

# Transportation
ACTIVITY_CARPOOL_OFFERED = "carpool.offered"
ACTIVITY_CARPOOL_JOINED = "carpool.joined"
ACTIVITY_CARPOOL_LEFT = "carpool.left"

# Messaging
ACTIVITY_MESSAGE_POSTED = "message.posted"

# Activity "type" buckets shown in the recent-activity feed
ACTIVITY_TYPE_BY_PREFIX = {
    "team": "team",
    "event": "calendar",
    "attendance": "attendance",
    "task": "task",
    "finance": "budget",
    "carpool": "carpool",
    "message": "message",
}
