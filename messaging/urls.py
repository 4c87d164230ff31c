from django.urls import path
from .views import MessageListCreateView, MessageDetailView, MessagePinView

urlpatterns = [
    path("messages/", MessageListCreateView.as_view(), name="message-list"),
    path("messages/<int:pk>/", MessageDetailView.as_view(), name="message-detail"),
    path("messages/<int:pk>/pin/", MessagePinView.as_view(), name="message-pin"),
]
