from django.urls import path
from .views import CarpoolListCreateView, CarpoolDetailView, CarpoolJoinView, CarpoolLeaveView

urlpatterns = [
    path("carpools/", CarpoolListCreateView.as_view(), name="carpool-list"),
    path("carpools/<int:pk>/", CarpoolDetailView.as_view(), name="carpool-detail"),
    path("carpools/<int:pk>/join/", CarpoolJoinView.as_view(), name="carpool-join"),
    path("carpools/<int:pk>/leave/", CarpoolLeaveView.as_view(), name="carpool-leave"),
]
