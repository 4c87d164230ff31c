from rest_framework.response import Response
from rest_framework import status
from django.contrib.auth import get_user_model

User = get_user_model()


def api_error(message: str, status_code=status.HTTP_400_BAD_REQUEST):
    """
    Small helper to standardize error responses across the apps.
    Always returns: {"error": "<message>"} with the given status code.
    """
    return Response({"error": message}, status=status_code)


def parse_bool(value, default=False) -> bool:
    if value is None:
        return default
    return str(value).lower() in ("1", "true", "yes", "on")


def get_teammate(ctx, user_id):
    """
    Return the user with the given id if they are on ctx.team, else None.
    """
    if user_id in (None, ""):
        return None
    try:
        return User.objects.get(pk=user_id, team=ctx.team)
    except (User.DoesNotExist, ValueError, TypeError):
        return None


def user_can_edit_event(ctx, event) -> bool:
    """
    Who can edit an event?
    - its creator
    - a team admin (user.role == 'admin') of the event's team
    """
    if event.team_id != ctx.team_id:
        return False
    return event.created_by_id == ctx.user_id or ctx.is_admin


def user_can_edit_task(ctx, task) -> bool:
    if task.team_id != ctx.team_id:
        return False
    return ctx.user_id in (task.created_by_id, task.assigned_to_id) or ctx.is_admin


def user_can_manage_record(ctx, record) -> bool:
    """
    Finance records, messages and similar team rows: author or team admin.
    """
    if record.team_id != ctx.team_id:
        return False
    owner_id = getattr(record, "created_by_id", None) or getattr(record, "user_id", None)
    return owner_id == ctx.user_id or ctx.is_admin
