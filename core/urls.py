from django.urls import path
from .views import (
    ActivityListView,
    CurrentTeamView,
    InviteCodeView,
    LeaveTeamView,
    TeamCreateView,
    TeamJoinView,
    TeamMemberDetailView,
    TeamMembersView,
)


urlpatterns = [
    path("teams/", TeamCreateView.as_view(), name="team-create"),
    path("teams/join/", TeamJoinView.as_view(), name="team-join"),
    path("teams/current/", CurrentTeamView.as_view(), name="team-current"),
    path("teams/current/members/", TeamMembersView.as_view(), name="team-members"),
    path(
        "teams/current/members/<int:member_id>/",
        TeamMemberDetailView.as_view(),
        name="team-member-detail",
    ),
    path("teams/current/invite-code/", InviteCodeView.as_view(), name="team-invite-code"),
    path("teams/current/leave/", LeaveTeamView.as_view(), name="team-leave"),

    path("activity/", ActivityListView.as_view(), name="activity-list"),
]
