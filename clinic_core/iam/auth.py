# clinic_core/iam/auth.py
from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication

from clinic_core.iam.services.actor import attach_actor, resolve_actor


def access_cookie_name() -> str:
    return settings.SIMPLE_JWT.get("AUTH_COOKIE", "ca_access")


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    Access token from `Authorization: Bearer <token>` or, when the header is
    absent, from the HttpOnly access cookie.

    On success the request Actor is built right away, so permission checks
    later in the request never re-read the profile.
    """

    def authenticate(self, request):
        if self.get_header(request) is not None:
            result = super().authenticate(request)
        else:
            result = self._authenticate_cookie(request)

        if result is not None:
            attach_actor(request, resolve_actor(result[0]))
        return result

    def _authenticate_cookie(self, request):
        raw_token = request.COOKIES.get(access_cookie_name())
        if not raw_token:
            return None
        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token
