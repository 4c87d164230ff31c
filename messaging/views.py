import logging

from django.db import transaction
from django.db.models import Count, Q
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import get_team_context
from core.generics import api_error
from .mentions import record_mentions
from .models import Message
from .serializers import MessageSerializer

logger = logging.getLogger("pitcrew.messaging")


class MessageListCreateView(APIView):
    """
    GET  /api/messaging/messages/?type=&search=&mentions=me
    POST /api/messaging/messages/
    """
    permission_classes = [IsAuthenticated]

    def get_throttles(self):
        # Only posting is rate limited
        self.throttle_scope = "message-create" if self.request.method == "POST" else None
        return super().get_throttles()

    def get(self, request):
        ctx = get_team_context(request)
        base = Message.objects.filter(team=ctx.team)

        counts = {choice: 0 for choice, _ in Message.TYPE_CHOICES}
        for row in base.values("message_type").annotate(total=Count("id")):
            counts[row["message_type"]] = row["total"]

        qs = base.select_related("user", "task").prefetch_related("mentions__mentioned_user")

        message_type = request.query_params.get("type")
        if message_type and message_type != "all":
            qs = qs.filter(message_type=message_type)

        search = request.query_params.get("search")
        if search:
            qs = qs.filter(
                Q(content__icontains=search) |
                Q(user__first_name__icontains=search) |
                Q(user__last_name__icontains=search)
            )

        if request.query_params.get("mentions") == "me":
            expertise = ctx.user.expertise or []
            qs = qs.filter(
                Q(mentions__mentioned_user=ctx.user) |
                Q(mentions__mentioned_category__in=expertise)
            ).distinct()

        qs = qs.order_by("-created_at", "-id")
        messages = list(qs[:200])
        pinned = [m for m in messages if m.is_pinned]
        regular = [m for m in messages if not m.is_pinned]

        return Response({
            "counts": counts,
            "pinned": MessageSerializer(pinned, many=True).data,
            "messages": MessageSerializer(regular, many=True).data,
        })

    def post(self, request):
        ctx = get_team_context(request)
        serializer = MessageSerializer(data=request.data, context={"team": ctx.team})
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            message = serializer.save(team=ctx.team, user=ctx.user)
            mentions = record_mentions(message)

        if mentions:
            logger.info(f"Message {message.id} recorded {len(mentions)} mention(s)")

        message = (
            Message.objects.select_related("user", "task")
            .prefetch_related("mentions__mentioned_user")
            .get(pk=message.pk)
        )
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


class MessagePinView(APIView):
    """
    POST /api/messaging/messages/<pk>/pin/   toggles is_pinned
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        ctx = get_team_context(request)
        try:
            message = Message.objects.get(pk=pk, team=ctx.team)
        except Message.DoesNotExist:
            return api_error("Message not found", status.HTTP_404_NOT_FOUND)

        message.is_pinned = not message.is_pinned
        message.save(update_fields=["is_pinned", "updated_at"])
        return Response({"id": message.id, "is_pinned": message.is_pinned})


class MessageDetailView(APIView):
    """
    DELETE /api/messaging/messages/<pk>/   (author or team admin)
    """
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk):
        ctx = get_team_context(request)
        try:
            message = Message.objects.get(pk=pk, team=ctx.team)
        except Message.DoesNotExist:
            return api_error("Message not found", status.HTTP_404_NOT_FOUND)

        if message.user_id != ctx.user_id and not ctx.is_admin:
            return api_error("You can only delete your own messages.", status.HTTP_403_FORBIDDEN)

        message.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
