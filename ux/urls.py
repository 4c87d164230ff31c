from django.urls import path
from ux.views.calendar import UXCalendarView
from ux.views.dashboard import UXDashboardView, UXUpcomingEventsView

urlpatterns = [
    path("calendar/", UXCalendarView.as_view(), name="ux-calendar"),
    path("dashboard/", UXDashboardView.as_view(), name="ux-dashboard"),
    path(
        "upcoming-events/",
        UXUpcomingEventsView.as_view(),
        name="ux-upcoming-events",
    ),
]
