import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .serializers import LoginSerializer, SignupSerializer

logger = logging.getLogger("pitcrew.auth")


def team_summary(user):
    """Team block the client uses to decide between onboarding and the app."""
    team = user.team
    if team is None:
        return None
    return {
        "id": team.id,
        "name": team.name,
        "team_number": team.team_number,
        "program": team.program,
    }


def account_payload(user):
    return {
        "id": user.id,
        "email": user.email,
        "username": user.username,
        "display_name": user.display_name,
        "role": user.role,
        "team": team_summary(user),
        "needs_team": user.team_id is None,
    }


def token_pair(user):
    refresh = RefreshToken.for_user(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


class SignupView(APIView):
    """
    POST /api/auth/signup/
    New accounts have no team; they create or join one next.
    """
    permission_classes = []
    authentication_classes = []

    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"Account created: user={user.id}")

        return Response(
            {"message": "User created successfully", "username": user.username, **token_pair(user)},
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    """
    POST /api/auth/login/   {email, password}
    """
    permission_classes = []
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]

        return Response({**token_pair(user), "user": account_payload(user)})


class MeView(APIView):
    """
    GET /api/auth/me/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(account_payload(request.user))
