from django.urls import path
from .views import (
    EventListCreateView,
    EventDetailView,
    EventRSVPView,
    EventRSVPListView,
    EventAttendanceView,
    EventAttendanceMarkView,
)

urlpatterns = [
    path("", EventListCreateView.as_view(), name="event-list"),
    path("<int:pk>/", EventDetailView.as_view(), name="event-detail"),
    path("<int:event_id>/rsvp/", EventRSVPView.as_view(), name="event-rsvp"),
    path("<int:event_id>/rsvps/", EventRSVPListView.as_view(), name="event-rsvp-list"),
    path("<int:event_id>/attendance/", EventAttendanceView.as_view(), name="event-attendance"),
    path(
        "<int:event_id>/attendance/<int:user_id>/",
        EventAttendanceMarkView.as_view(),
        name="event-attendance-mark",
    ),
]
