from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("pitcrew.core")

# Headers DRF attaches to error responses (auth challenges, throttling, 405s)
PASSTHROUGH_HEADERS = ("WWW-Authenticate", "Retry-After", "Allow")


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "errors": response.data,
            },
            status=response.status_code,
            headers={k: v for k, v in response.items() if k in PASSTHROUGH_HEADERS},
        )

    # Unhandled exceptions -> 500
    view = context.get("view")
    logger.exception(
        "Unhandled API exception in %s", view.__class__.__name__ if view else "unknown view", exc_info=exc
    )

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
