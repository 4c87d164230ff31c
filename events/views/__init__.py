from .events import EventListCreateView, EventDetailView
from .rsvp import EventRSVPView, EventRSVPListView, EventAttendanceView, EventAttendanceMarkView
