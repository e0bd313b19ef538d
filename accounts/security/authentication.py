import logging

import jwt
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.authentication import BaseAuthentication
from rest_framework import exceptions
from .app_jwt import verify_app_jwt
from ..models import AppUser

logger = logging.getLogger(__name__)


class AppJWTAuthentication(BaseAuthentication):
    keyword = "Bearer"

    def authenticate(self, request):
        # 1) Authorization 헤더 없으면 익명 (IsAuthenticated 가 401 처리)
        auth = request.META.get("HTTP_AUTHORIZATION", "")
        if not auth:
            return None

        # 2) Bearer 형태가 아니면 다른 인증 방식에 넘긴다
        if not auth.lower().startswith("bearer "):
            return None

        token = auth.split(" ", 1)[1].strip()
        if not token:
            raise exceptions.AuthenticationFailed("Empty token")

        # 3) 서명 / 만료 검증
        try:
            payload = verify_app_jwt(token)
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed("Token expired")
        except jwt.InvalidTokenError:
            raise exceptions.AuthenticationFailed("Invalid token")

        # 4) sub(=AppUser.id) 로 유저 조회
        try:
            user = AppUser.objects.filter(id=payload["sub"]).first()
        except (DjangoValidationError, ValueError):
            # sub 가 UUID 형식이 아닌 경우
            user = None

        if not user:
            # 토큰은 유효한데 DB 에 유저가 없는 케이스 → 프론트에서 재로그인 유도
            logger.warning("token subject not found sub=%s", payload.get("sub"))
            raise exceptions.AuthenticationFailed("User not found")

        return (user, payload)

    def authenticate_header(self, request):
        # 이게 있어야 DRF 가 403 대신 401 을 내려준다
        return f'{self.keyword} realm="api"'
