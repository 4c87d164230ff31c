import logging

from django.db import IntegrityError, transaction
from django.db.models import Prefetch
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import get_team_context
from core.generics import api_error, parse_bool
from events.datetime_utils import now
from . import occupancy
from .models import Carpool, CarpoolRider
from .serializers import CarpoolJoinSerializer, CarpoolSerializer

logger = logging.getLogger("pitcrew.transport")


def team_carpools(ctx):
    return (
        Carpool.objects.filter(team=ctx.team)
        .select_related("driver", "event")
        .prefetch_related(
            Prefetch("riders", queryset=CarpoolRider.objects.select_related("rider"))
        )
    )


class CarpoolListCreateView(APIView):
    """
    GET  /api/transport/carpools/?vehicle=car|bus|all&sort=departure_time|seats_available&event=&upcoming=
    POST /api/transport/carpools/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        qs = team_carpools(ctx)

        event_id = request.query_params.get("event")
        if event_id:
            qs = qs.filter(event_id=event_id)

        if parse_bool(request.query_params.get("upcoming")):
            qs = qs.filter(departure_time__gte=now())

        carpools = list(qs)
        try:
            visible = occupancy.filter_carpools(carpools, request.query_params.get("vehicle", "all"))
            visible = occupancy.sort_carpools(visible, request.query_params.get("sort", occupancy.SORT_DEPARTURE))
        except ValueError as e:
            return api_error(str(e))

        return Response({
            "stats": occupancy.overview(carpools, now()),
            "results": CarpoolSerializer(visible, many=True, context={"user": ctx.user}).data,
        })

    def post(self, request):
        ctx = get_team_context(request)
        serializer = CarpoolSerializer(data=request.data, context={"team": ctx.team, "user": ctx.user})
        serializer.is_valid(raise_exception=True)
        carpool = serializer.save(team=ctx.team, driver=ctx.user)
        logger.info(f"Carpool {carpool.id} offered by user {ctx.user_id} with {carpool.available_seats} seats")

        carpool = team_carpools(ctx).get(pk=carpool.pk)
        return Response(
            CarpoolSerializer(carpool, context={"user": ctx.user}).data,
            status=status.HTTP_201_CREATED,
        )


class CarpoolDetailView(APIView):
    """
    GET    /api/transport/carpools/<pk>/
    PATCH  /api/transport/carpools/<pk>/   (driver)
    DELETE /api/transport/carpools/<pk>/   (driver)
    """
    permission_classes = [IsAuthenticated]

    def get_object(self, ctx, pk):
        try:
            return team_carpools(ctx).get(pk=pk)
        except Carpool.DoesNotExist:
            return None

    def get(self, request, pk):
        ctx = get_team_context(request)
        carpool = self.get_object(ctx, pk)
        if carpool is None:
            return api_error("Ride not found", status.HTTP_404_NOT_FOUND)
        return Response(CarpoolSerializer(carpool, context={"user": ctx.user}).data)

    def patch(self, request, pk):
        ctx = get_team_context(request)
        carpool = self.get_object(ctx, pk)
        if carpool is None:
            return api_error("Ride not found", status.HTTP_404_NOT_FOUND)
        if carpool.driver_id != ctx.user_id:
            return api_error("Only the driver can edit this ride.", status.HTTP_403_FORBIDDEN)

        serializer = CarpoolSerializer(
            carpool, data=request.data, partial=True, context={"team": ctx.team, "user": ctx.user}
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()

        carpool = self.get_object(ctx, pk)
        return Response(CarpoolSerializer(carpool, context={"user": ctx.user}).data)

    def delete(self, request, pk):
        ctx = get_team_context(request)
        carpool = self.get_object(ctx, pk)
        if carpool is None:
            return api_error("Ride not found", status.HTTP_404_NOT_FOUND)
        if carpool.driver_id != ctx.user_id:
            return api_error("Only the driver can cancel this ride.", status.HTTP_403_FORBIDDEN)

        carpool.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class CarpoolJoinView(APIView):
    """
    POST /api/transport/carpools/<pk>/join/   {pickup_location?, notes?}

    The carpool row is locked while seats are counted so two members
    cannot take the last seat at the same time.
    """
    permission_classes = [IsAuthenticated]
    throttle_scope = "carpool-join"

    def post(self, request, pk):
        ctx = get_team_context(request)
        serializer = CarpoolJoinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            with transaction.atomic():
                carpool = (
                    Carpool.objects.select_for_update()
                    .filter(team=ctx.team)
                    .prefetch_related("riders")
                    .get(pk=pk)
                )

                state = occupancy.eligibility(carpool, ctx.user)
                if state == occupancy.ELIGIBILITY_DRIVER:
                    return api_error("You are driving this ride.", status.HTTP_400_BAD_REQUEST)
                if state == occupancy.ELIGIBILITY_RIDING:
                    return api_error("You have already joined this ride.", status.HTTP_409_CONFLICT)
                if state == occupancy.ELIGIBILITY_FULL:
                    logger.warning(f"Join rejected: carpool {carpool.id} is full (user={ctx.user_id})")
                    return api_error("This ride is full", status.HTTP_400_BAD_REQUEST)

                CarpoolRider.objects.create(
                    carpool=carpool,
                    rider=ctx.user,
                    pickup_location=serializer.validated_data.get("pickup_location"),
                    notes=serializer.validated_data.get("notes"),
                )
        except Carpool.DoesNotExist:
            return api_error("Ride not found", status.HTTP_404_NOT_FOUND)
        except IntegrityError:
            return api_error("You have already joined this ride.", status.HTTP_409_CONFLICT)

        logger.info(f"User {ctx.user_id} joined carpool {pk}")
        carpool = team_carpools(ctx).get(pk=pk)
        return Response(
            CarpoolSerializer(carpool, context={"user": ctx.user}).data,
            status=status.HTTP_201_CREATED,
        )


class CarpoolLeaveView(APIView):
    """
    POST /api/transport/carpools/<pk>/leave/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        ctx = get_team_context(request)
        if not Carpool.objects.filter(pk=pk, team=ctx.team).exists():
            return api_error("Ride not found", status.HTTP_404_NOT_FOUND)

        seat = CarpoolRider.objects.filter(carpool_id=pk, rider=ctx.user).select_related("carpool").first()
        if seat is None:
            return api_error("You are not riding in this carpool.", status.HTTP_400_BAD_REQUEST)

        seat.delete()
        logger.info(f"User {ctx.user_id} left carpool {pk}")

        carpool = team_carpools(ctx).get(pk=pk)
        return Response(CarpoolSerializer(carpool, context={"user": ctx.user}).data)
