from .models import Task


def task_progress(team) -> dict:
    """Completion numbers for the team's task board."""
    by_status = {choice: 0 for choice, _ in Task.STATUS_CHOICES}
    for value in Task.objects.filter(team=team).values_list("status", flat=True):
        by_status[value] = by_status.get(value, 0) + 1

    total = sum(by_status.values())
    completed = by_status[Task.STATUS_DONE]
    return {
        "completed": completed,
        "total": total,
        "progress_percentage": round(completed / total * 100) if total else 0,
        "by_status": by_status,
    }
