from django.urls import path
from .views import FRCEventsView, FTCEventsView

urlpatterns = [
    path("frc/", FRCEventsView.as_view(), name="competition-frc"),
    path("ftc/", FTCEventsView.as_view(), name="competition-ftc"),
]
