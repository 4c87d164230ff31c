import logging
import time

from django.conf import settings
from django.db import connections, transaction
from django.db.utils import OperationalError
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from events.models import EventRSVP
from tasks.models import Task
from transport.models import Carpool, CarpoolRider
from users.models import User
from users.serializers import MemberSummarySerializer, UserSerializer
from .constants import ACTIVITY_MEMBER_JOINED, ACTIVITY_MEMBER_LEFT, ACTIVITY_TEAM_CREATED
from .context import get_team_context
from .generics import api_error
from .models import DomainActivity
from .serializers import (
    DomainActivitySerializer,
    MemberRoleSerializer,
    TeamJoinSerializer,
    TeamSerializer,
)
from .services import ActivityService

logger = logging.getLogger("pitcrew.core")


# -----------------------------
# TEAMS
# -----------------------------
class TeamCreateView(APIView):
    """
    POST /api/core/teams/
    Creates a team; the creator joins it as admin.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        user = request.user
        if user.team_id:
            return api_error("You are already on a team. Leave it before creating a new one.")

        serializer = TeamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            team = serializer.save()
            user.team = team
            user.role = User.ROLE_ADMIN
            user.save(update_fields=["team", "role", "updated_at"])

        ActivityService.safe_log_activity(
            actor=user,
            verb=ACTIVITY_TEAM_CREATED,
            target=team,
            team=team,
            metadata={"team_number": team.team_number},
        )
        logger.info(f"Team {team.team_number} created by user {user.id}")

        data = TeamSerializer(team).data
        data["invite_code"] = team.invite_code
        return Response(data, status=status.HTTP_201_CREATED)


class TeamJoinView(APIView):
    """
    POST /api/core/teams/join/
    Body: { "invite_code": "...", "expertise": [...] }
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        user = request.user
        serializer = TeamJoinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = serializer.validated_data["invite_code"]

        if user.team_id == team.id:
            return Response(TeamSerializer(team).data, status=status.HTTP_200_OK)
        if user.team_id:
            return api_error("You are already on a team. Leave it before joining another.")

        user.team = team
        user.role = User.ROLE_STUDENT
        update_fields = ["team", "role", "updated_at"]
        if "expertise" in serializer.validated_data:
            user.expertise = list(dict.fromkeys(serializer.validated_data["expertise"]))
            update_fields.append("expertise")
        user.save(update_fields=update_fields)

        ActivityService.safe_log_activity(
            actor=user,
            verb=ACTIVITY_MEMBER_JOINED,
            target=user,
            team=team,
            metadata={"name": user.display_name},
        )
        return Response(TeamSerializer(team).data, status=status.HTTP_201_CREATED)


class CurrentTeamView(APIView):
    """
    GET   /api/core/teams/current/
    PATCH /api/core/teams/current/   (team admin)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        data = TeamSerializer(ctx.team).data
        if ctx.is_admin:
            data["invite_code"] = ctx.team.invite_code
        return Response(data)

    def patch(self, request):
        ctx = get_team_context(request)
        if not ctx.is_admin:
            return api_error("Only team admins can edit team details.", status.HTTP_403_FORBIDDEN)

        serializer = TeamSerializer(ctx.team, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        team = serializer.save()
        return Response(TeamSerializer(team).data)


class TeamMembersView(APIView):
    """
    GET /api/core/teams/current/members/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        members = User.objects.filter(team=ctx.team).order_by("first_name", "last_name", "username")
        return Response(UserSerializer(members, many=True).data)


class TeamMemberDetailView(APIView):
    """
    PATCH:  Change a member's role (team admin).
    DELETE: Remove a member from the team (team admin).
    """
    permission_classes = [IsAuthenticated]

    def get_member(self, ctx, member_id):
        return get_object_or_404(User, pk=member_id, team=ctx.team)

    def patch(self, request, member_id):
        ctx = get_team_context(request)
        if not ctx.is_admin:
            return api_error("Only team admins can change roles.", status.HTTP_403_FORBIDDEN)

        member = self.get_member(ctx, member_id)
        serializer = MemberRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_role = serializer.validated_data["role"]

        if member.pk == ctx.user_id and new_role != User.ROLE_ADMIN and not _has_other_admin(ctx):
            return api_error("A team needs at least one admin.")

        member.role = new_role
        member.save(update_fields=["role", "updated_at"])
        return Response(MemberSummarySerializer(member).data)

    def delete(self, request, member_id):
        ctx = get_team_context(request)
        if not ctx.is_admin:
            return api_error("Only team admins can remove members.", status.HTTP_403_FORBIDDEN)

        member = self.get_member(ctx, member_id)
        if member.pk == ctx.user_id:
            return api_error("Use the leave endpoint to leave your own team.")

        _remove_from_team(member, ctx.team, actor=ctx.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class InviteCodeView(APIView):
    """
    GET  /api/core/teams/current/invite-code/
    POST /api/core/teams/current/invite-code/   -> regenerate (team admin)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        return Response({"invite_code": ctx.team.invite_code})

    def post(self, request):
        ctx = get_team_context(request)
        if not ctx.is_admin:
            return api_error("Only team admins can regenerate the invite code.", status.HTTP_403_FORBIDDEN)

        code = ctx.team.regenerate_invite_code()
        logger.info(f"Invite code regenerated for team {ctx.team.team_number}")
        return Response({"invite_code": code})


class LeaveTeamView(APIView):
    """
    POST /api/core/teams/current/leave/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ctx = get_team_context(request)
        if ctx.is_admin and not _has_other_admin(ctx) and ctx.team.members.exclude(pk=ctx.user_id).exists():
            return api_error("Promote another admin before leaving the team.")

        _remove_from_team(ctx.user, ctx.team, actor=ctx.user)
        return Response({"detail": "You have left the team."})


def _has_other_admin(ctx) -> bool:
    return ctx.team.members.filter(role=User.ROLE_ADMIN).exclude(pk=ctx.user_id).exists()


def _remove_from_team(member, team, actor):
    """
    Detach member from team and release what they held on it: every carpool
    seat, upcoming rides they were driving, RSVPs to upcoming events and open
    task assignments. Past rides, past RSVPs and attendance are kept.
    """
    current = timezone.now()
    with transaction.atomic():
        released_seats, _ = CarpoolRider.objects.filter(carpool__team=team, rider=member).delete()
        Carpool.objects.filter(team=team, driver=member, departure_time__gte=current).delete()
        EventRSVP.objects.filter(event__team=team, event__start_time__gte=current, user=member).delete()
        Task.objects.filter(team=team, assigned_to=member).exclude(status=Task.STATUS_DONE).update(assigned_to=None)

        member.team = None
        member.role = User.ROLE_STUDENT
        member.save(update_fields=["team", "role", "updated_at"])

    logger.info(f"Member {member.id} left team {team.id}; released {released_seats} carpool seat(s)")
    ActivityService.safe_log_activity(
        actor=actor,
        verb=ACTIVITY_MEMBER_LEFT,
        target=member,
        team=team,
        metadata={"name": member.display_name},
    )


# -----------------------------
# ACTIVITY
# -----------------------------
class ActivityListView(APIView):
    """
    GET /api/core/activity/?since=<iso datetime>&limit=20

    Newest first. Clients poll with `since` set to the newest timestamp
    they have seen to pick up changes made by teammates.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        qs = DomainActivity.objects.filter(team=ctx.team).select_related("actor")

        since_raw = request.query_params.get("since")
        if since_raw:
            since = parse_datetime(since_raw)
            if since is None:
                return api_error("Invalid 'since' value. Use an ISO 8601 datetime.")
            qs = qs.filter(timestamp__gt=since)

        try:
            limit = int(request.query_params.get("limit", 20))
        except ValueError:
            return api_error("Invalid 'limit' value.")
        limit = max(1, min(limit, 100))

        items = list(qs[:limit])
        return Response({
            "results": DomainActivitySerializer(items, many=True).data,
            "latest": items[0].timestamp.isoformat() if items else since_raw,
        })


class HealthCheckView(APIView):
    """
    Lightweight health endpoint for uptime checks.
    - Checks DB connectivity
    - Returns env and simple latency
    """
    permission_classes = [AllowAny]
    authentication_classes = []  # public endpoint

    def get(self, request, *args, **kwargs):
        start = time.time()

        db_ok = True
        try:
            connections["default"].cursor()
        except OperationalError:
            db_ok = False

        duration_ms = int((time.time() - start) * 1000)

        return Response(
            {
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "env": getattr(settings, "ENV", "unknown"),
                "latency_ms": duration_ms,
            }
        )
