# clinic_core/iam/openapi.py
from django.conf import settings
from drf_spectacular.extensions import OpenApiAuthenticationExtension


class CookieOrHeaderJWTAuthenticationScheme(OpenApiAuthenticationExtension):
    """
    Two schemes for one authentication class: Swagger "Authorize" takes the
    bearer token, browsers send the access cookie.
    """
    target_class = "clinic_core.iam.auth.CookieOrHeaderJWTAuthentication"
    name = ["BearerJWT", "AccessCookie"]

    def get_security_definition(self, auto_schema):
        cookie_name = settings.SIMPLE_JWT.get("AUTH_COOKIE", "ca_access")
        return [
            {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Access token from POST /api/v1/auth/login/.",
            },
            {
                "type": "apiKey",
                "in": "cookie",
                "name": cookie_name,
                "description": "HttpOnly access cookie set by the login endpoint.",
            },
        ]
