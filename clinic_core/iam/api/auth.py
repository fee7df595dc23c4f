# clinic_core/iam/api/auth.py
from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from clinic_core.iam.api.schema_serializers import DetailResponseSerializer, LoginRequestSerializer
from clinic_core.iam.services.actor import resolve_actor

logger = logging.getLogger(__name__)


def _jwt_settings() -> dict:
    return getattr(settings, "SIMPLE_JWT", {}) or {}


def _lifetime_seconds(key: str, default: timedelta) -> int:
    value = _jwt_settings().get(key, default)
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    return int(value)


def _cookie_specs(access: str, refresh: str):
    cfg = _jwt_settings()
    yield cfg.get("AUTH_COOKIE", "ca_access"), access, _lifetime_seconds("ACCESS_TOKEN_LIFETIME", timedelta(minutes=10))
    yield (
        cfg.get("AUTH_COOKIE_REFRESH", "ca_refresh"),
        refresh,
        _lifetime_seconds("REFRESH_TOKEN_LIFETIME", timedelta(days=14)),
    )


def set_auth_cookies(response: Response, *, access: str, refresh: str) -> None:
    cfg = _jwt_settings()
    for name, value, max_age in _cookie_specs(access, refresh):
        response.set_cookie(
            name,
            value,
            max_age=max_age,
            httponly=cfg.get("AUTH_COOKIE_HTTP_ONLY", True),
            secure=bool(cfg.get("AUTH_COOKIE_SECURE", False)),
            samesite=cfg.get("AUTH_COOKIE_SAMESITE", "Lax"),
            path="/",
        )


def clear_auth_cookies(response: Response) -> None:
    cfg = _jwt_settings()
    for key, default in (("AUTH_COOKIE", "ca_access"), ("AUTH_COOKIE_REFRESH", "ca_refresh")):
        response.delete_cookie(cfg.get(key, default), path="/")


class _PublicAuthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get_authenticate_header(self, request):
        # keep credential failures at 401 even without authentication classes
        return 'Bearer realm="api"'


class LoginView(_PublicAuthView):
    @extend_schema(request=LoginRequestSerializer, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        payload = LoginRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        d = payload.validated_data

        email = (d.get("email") or d.get("username") or "").strip().lower()
        tokens = TokenObtainPairSerializer(data={"username": email, "password": d["password"]})
        tokens.is_valid(raise_exception=True)

        # a valid password is not enough: the clinic account must be usable
        if resolve_actor(tokens.user) is None:
            logger.info("Login refused for %s: no active clinic account", email)
            raise AuthenticationFailed("Account is disabled")

        res = Response({"detail": "login ok"}, status=status.HTTP_200_OK)
        set_auth_cookies(res, access=tokens.validated_data["access"], refresh=tokens.validated_data["refresh"])
        logger.info("Login ok for %s", email)
        return res


class RefreshView(_PublicAuthView):
    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        refresh_name = _jwt_settings().get("AUTH_COOKIE_REFRESH", "ca_refresh")
        refresh = request.COOKIES.get(refresh_name) or request.data.get("refresh")

        ser = TokenRefreshSerializer(data={"refresh": refresh})
        ser.is_valid(raise_exception=True)

        res = Response({"detail": "refreshed"}, status=status.HTTP_200_OK)
        set_auth_cookies(
            res,
            access=ser.validated_data["access"],
            refresh=ser.validated_data.get("refresh", refresh),
        )
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        res = Response({"detail": "logged out"}, status=status.HTTP_200_OK)
        clear_auth_cookies(res)
        return res
