# core/context.py
"""
Request-scoped team context.

Every team-scoped query takes a TeamContext instead of reading the current
user/team from ambient state. Views build it once per request with
get_team_context().
"""
from dataclasses import dataclass

from rest_framework.exceptions import PermissionDenied

from .models import Team


NO_TEAM_MESSAGE = "Please join a team first."


@dataclass(frozen=True)
class TeamContext:
    user: object
    team: Team

    @property
    def user_id(self):
        return self.user.pk

    @property
    def team_id(self):
        return self.team.pk

    @property
    def is_admin(self) -> bool:
        return getattr(self.user, "role", None) == "admin" or getattr(self.user, "is_superuser", False)


def get_team_context(request) -> TeamContext:
    """
    Build the context for an authenticated request.
    Raises PermissionDenied (403) when the user has no team yet.
    """
    user = request.user
    team = getattr(user, "team", None) if user and user.is_authenticated else None
    if team is None:
        raise PermissionDenied(NO_TEAM_MESSAGE)
    return TeamContext(user=user, team=team)
