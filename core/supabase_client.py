# core/supabase_client.py
# Supabase client for storage operations (finance receipts)

import logging

from django.conf import settings
from supabase import create_client

logger = logging.getLogger("pitcrew.storage")

_supabase_client = None


def get_supabase_client():
    """
    Get the Supabase client instance (singleton pattern).
    Uses service_role key for admin access. Returns None when not configured.
    """
    global _supabase_client

    if _supabase_client is None:
        url = settings.SUPABASE_URL
        key = settings.SUPABASE_SERVICE_ROLE_KEY

        if not url or not key:
            logger.warning("Supabase credentials not configured")
            return None

        try:
            _supabase_client = create_client(url, key)
            logger.info("Supabase client initialized")
        except Exception as e:
            logger.error(f"Failed to create Supabase client: {e}")
            return None

    return _supabase_client


def upload_receipt(team_id, filename: str, content: bytes, content_type: str) -> str | None:
    """
    Upload a receipt file to Supabase Storage.

    Returns:
        The storage path if successful, None otherwise
    """
    client = get_supabase_client()
    if not client:
        return None

    path = f"{team_id}/{filename}"
    try:
        client.storage.from_(settings.SUPABASE_RECEIPTS_BUCKET).upload(
            path,
            content,
            file_options={"content-type": content_type, "upsert": "true"},
        )
    except Exception as e:
        logger.error(f"Failed to upload receipt {path}: {e}")
        return None

    logger.info(f"Uploaded receipt to storage: {path}")
    return path


def get_signed_url(path: str, expires_in: int = 3600) -> str | None:
    """
    Generate a signed URL for a stored receipt.

    Args:
        path: The storage path (e.g., "12/receipt_ab12.pdf")
        expires_in: URL expiry in seconds (default 1 hour)
    """
    client = get_supabase_client()
    if not client:
        return None

    try:
        result = client.storage.from_(settings.SUPABASE_RECEIPTS_BUCKET).create_signed_url(path, expires_in)
    except Exception as e:
        logger.error(f"Failed to generate signed URL: {e}")
        return None

    if result and "signedURL" in result:
        return result["signedURL"]
    if result and "signedUrl" in result:
        return result["signedUrl"]
    return None
