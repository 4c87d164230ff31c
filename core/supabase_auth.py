# core/supabase_auth.py
# Custom DRF authentication class to verify Supabase JWTs

import logging

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = logging.getLogger("pitcrew.auth")

User = get_user_model()


class SupabaseJWTAuthentication(BaseAuthentication):
    """
    Custom authentication class that validates Supabase JWTs.

    This authenticator:
    1. Extracts the JWT from the Authorization header
    2. Verifies the token signature using the Supabase JWT secret
    3. Looks up or creates a Django user based on the token's email claim
    """

    def authenticate_header(self, request):
        return 'Bearer realm="api"'

    def authenticate(self, request):
        auth_header = request.headers.get("Authorization", "")

        if not auth_header.startswith("Bearer "):
            return None  # Let other auth backends handle it

        token = auth_header.split(" ", 1)[1].strip()

        secret = settings.SUPABASE_JWT_SECRET
        if not secret:
            return None  # Supabase auth not configured; SimpleJWT may still accept it

        try:
            # Supabase uses HS256 by default
            payload = jwt.decode(
                token,
                secret,
                algorithms=["HS256"],
                audience="authenticated",
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid Supabase token: {e}")
            return None  # Let other auth backends try

        if not payload.get("sub"):
            raise AuthenticationFailed("Invalid token: missing user ID")

        user = self._get_or_create_user(payload.get("email"), payload)
        return (user, payload)

    def _get_or_create_user(self, email: str, payload: dict):
        """
        Map a Supabase identity to a local user, using email as the key.
        """
        if not email:
            raise AuthenticationFailed("Token missing email claim")

        user = User.objects.filter(email__iexact=email).first()
        if user is not None:
            return user

        username = email.split("@")[0]
        # Ensure unique username
        base_username = username
        counter = 1
        while User.objects.filter(username=username).exists():
            username = f"{base_username}_{counter}"
            counter += 1

        metadata = payload.get("user_metadata") or {}
        user = User.objects.create(
            username=username,
            email=email,
            first_name=metadata.get("first_name", "")[:150],
            last_name=metadata.get("last_name", "")[:150],
        )
        user.set_unusable_password()
        user.save(update_fields=["password"])
        logger.info(f"Created new user from Supabase: {email}")
        return user
