import logging

from django.db.models import Q
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import get_team_context
from core.generics import api_error, user_can_edit_task
from .models import Task
from .serializers import TaskSerializer
from .services import task_progress

logger = logging.getLogger("pitcrew.tasks")


class TaskListCreateView(APIView):
    """
    GET  /api/tasks/?search=&status=&priority=&assignee=
    POST /api/tasks/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        qs = Task.objects.filter(team=ctx.team).select_related("assigned_to", "created_by")

        search = request.query_params.get("search")
        if search:
            qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))

        status_param = request.query_params.get("status")
        if status_param and status_param != "all":
            qs = qs.filter(status=status_param)

        priority = request.query_params.get("priority")
        if priority and priority != "all":
            qs = qs.filter(priority=priority)

        assignee = request.query_params.get("assignee")
        if assignee and assignee != "all":
            if assignee == "me":
                qs = qs.filter(assigned_to=ctx.user)
            elif assignee == "unassigned":
                qs = qs.filter(assigned_to__isnull=True)
            else:
                try:
                    qs = qs.filter(assigned_to_id=int(assignee))
                except ValueError:
                    return api_error("Invalid 'assignee' value.")

        return Response(TaskSerializer(qs.order_by("-created_at", "-id"), many=True).data)

    def post(self, request):
        ctx = get_team_context(request)
        serializer = TaskSerializer(data=request.data, context={"team": ctx.team})
        serializer.is_valid(raise_exception=True)
        task = serializer.save(team=ctx.team, created_by=ctx.user, status=Task.STATUS_TODO)
        logger.info(f"Task {task.id} created in team {ctx.team_id}")
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)


class TaskDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, ctx, pk):
        try:
            return Task.objects.select_related("assigned_to", "created_by").get(pk=pk, team=ctx.team)
        except Task.DoesNotExist:
            return None

    def get(self, request, pk):
        ctx = get_team_context(request)
        task = self.get_object(ctx, pk)
        if task is None:
            return api_error("Task not found", status.HTTP_404_NOT_FOUND)
        return Response(TaskSerializer(task).data)

    def patch(self, request, pk):
        ctx = get_team_context(request)
        task = self.get_object(ctx, pk)
        if task is None:
            return api_error("Task not found", status.HTTP_404_NOT_FOUND)
        if not user_can_edit_task(ctx, task):
            return api_error("You do not have permission to edit this task.", status.HTTP_403_FORBIDDEN)

        serializer = TaskSerializer(task, data=request.data, partial=True, context={"team": ctx.team})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    put = patch

    def delete(self, request, pk):
        ctx = get_team_context(request)
        task = self.get_object(ctx, pk)
        if task is None:
            return api_error("Task not found", status.HTTP_404_NOT_FOUND)
        if task.created_by_id != ctx.user_id and not ctx.is_admin:
            return api_error("Only the creator or a team admin can delete this task.", status.HTTP_403_FORBIDDEN)

        task.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class TaskToggleView(APIView):
    """
    POST /api/tasks/<pk>/toggle/   done <-> todo
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        ctx = get_team_context(request)
        try:
            task = Task.objects.get(pk=pk, team=ctx.team)
        except Task.DoesNotExist:
            return api_error("Task not found", status.HTTP_404_NOT_FOUND)

        task.status = task.toggled_status()
        task.save(update_fields=["status", "updated_at"])
        return Response(TaskSerializer(task).data)


class TaskStatsView(APIView):
    """
    GET /api/tasks/stats/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        return Response(task_progress(ctx.team))

