# config/exceptions.py
import logging

from django.db import DatabaseError
from redis.exceptions import RedisError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

# 저장소/캐시 장애는 내부 정보 없이 503 으로만 내려준다
UPSTREAM_ERRORS = (DatabaseError, RedisError, ConnectionError)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, UPSTREAM_ERRORS):
        view = context.get("view")
        logger.exception(
            "upstream failure in %s", view.__class__.__name__ if view else "unknown view"
        )
        return Response(
            {
                "detail": "Service temporarily unavailable.",
                "code": "upstream_failure",
            },
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return None
