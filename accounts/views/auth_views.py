# accounts/views/auth_views.py
import logging
from urllib.parse import urlencode, urlsplit

import requests
from django.conf import settings
from django.http import HttpResponseRedirect
from drf_spectacular.utils import extend_schema
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions

from accounts.integrations.google_oauth import GoogleOAuthClient
from accounts.serializers.auth_serializers import (
    GoogleCallbackSerializer,
    LogoutResponseSerializer,
    UserSerializer,
)
from accounts.services import IncompleteProfile, find_or_create_user, issue_session, profile_from_userinfo
from audit.services import AuditRecorder
logger = logging.getLogger(__name__)


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def resolve_frontend_url(requested: str | None) -> str:
    """요청된 frontend_url 은 FRONTEND_URL 과 origin 이 같을 때만 사용"""
    default = settings.FRONTEND_URL.rstrip("/")
    if not requested:
        return default
    try:
        origin = _origin(requested)
    except ValueError:
        return default
    return origin if origin == _origin(default) else default


def frontend_redirect(frontend_url: str, **params) -> HttpResponseRedirect:
    return HttpResponseRedirect(f"{frontend_url}/auth/callback?{urlencode(params)}")


class GoogleLoginView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    @extend_schema(responses={302: None})
    def get(self, request):
        # frontend_url 은 OAuth state 로 콜백까지 들고 간다
        state = request.query_params.get("frontend_url") or ""
        return HttpResponseRedirect(GoogleOAuthClient().authorization_url(state or None))


class GoogleCallbackView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    @extend_schema(responses={302: None})
    def get(self, request):
        ser = GoogleCallbackSerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)

        frontend_url = resolve_frontend_url(
            ser.validated_data.get("state") or request.query_params.get("frontend_url")
        )
        audit = AuditRecorder()

        if ser.validated_data.get("error"):
            logger.warning("[google-login] provider error=%s", ser.validated_data["error"])
            audit.login_failed(request, reason=f"provider_error:{ser.validated_data['error']}")
            return frontend_redirect(frontend_url, error="login_failed")

        code = ser.validated_data.get("code")
        if not code:
            audit.login_failed(request, reason="missing_code")
            return frontend_redirect(frontend_url, error="login_failed")

        client = GoogleOAuthClient()
        userinfo = {}
        try:
            #
            # 1. authorization code -> 토큰 교환
            #
            token_res = client.exchange_code(code)
            access_token = token_res.get("access_token")
            if not access_token:
                raise IncompleteProfile("no access_token in token response")

            #
            # 2. access_token -> 유저 정보
            #
            userinfo = client.get_userinfo(access_token)
            profile = profile_from_userinfo(userinfo)

        except (requests.RequestException, IncompleteProfile) as e:
            logger.exception("[google-login] google_login_failed")
            audit.login_failed(request, reason=type(e).__name__, email=userinfo.get("email"))
            return frontend_redirect(frontend_url, error="login_failed")

        #
        # 3. DB upsert & 앱 JWT 발급
        #
        user = find_or_create_user(**profile)
        session = issue_session(user)
        audit.login(request, user)

        logger.info("[google-login] login ok user=%s", user.id)
        return frontend_redirect(frontend_url, token=session["access_token"])


class ProfileView(APIView):
    @extend_schema(responses=UserSerializer)
    def get(self, request):
        return Response(UserSerializer(request.user).data, status=status.HTTP_200_OK)


class LogoutView(APIView):
    @extend_schema(request=None, responses=LogoutResponseSerializer)
    def post(self, request):
        # JWT 는 stateless → 실제 폐기는 클라이언트가 토큰을 지우는 것
        AuditRecorder().logout(request, request.user)
        return Response({"message": "Logged out successfully"}, status=status.HTTP_200_OK)
