# clinic_core/web/guards.py
from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from django.shortcuts import render
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

from clinic_core.common.api.exceptions import ensure_request_id
from clinic_core.iam.auth import CookieOrHeaderJWTAuthentication
from clinic_core.iam.permissions import Actor
from clinic_core.iam.routes import check_route
from clinic_core.iam.services.actor import get_request_actor

logger = logging.getLogger(__name__)

ACCESS_DENIED_TEMPLATE = "web/access_denied.html"


def page_actor(request) -> Optional[Actor]:
    """
    Actor of a page request: Django session first, then the JWT access cookie.
    """
    actor = get_request_actor(request)
    if actor is not None:
        return actor

    try:
        result = CookieOrHeaderJWTAuthentication().authenticate(request)
    except (InvalidToken, TokenError, AuthenticationFailed) as exc:
        logger.info("Page request with unusable access token: %s", exc)
        return None

    if result is None:
        return None
    # the authentication class attached the actor
    return getattr(request, "actor", None)


def guarded_page(route: str):
    """
    Gate a page view on ROUTE_PERMISSIONS[route].

    `organization_id` / `unit_id` URL kwargs become the evaluator targets.
    Denied requests get the access-denied page: 401 without an actor, 403
    otherwise.
    """

    def decorator(view):
        @wraps(view)
        def wrapped(request, *args, **kwargs):
            actor = page_actor(request)
            decision = check_route(
                actor,
                route,
                organization_id=kwargs.get("organization_id"),
                unit_id=kwargs.get("unit_id"),
            )
            if not decision.allowed:
                logger.info(
                    "Page denied: actor=%s route=%s reason=%s",
                    getattr(actor, "id", None),
                    route,
                    decision.reason,
                )
                return render(
                    request,
                    ACCESS_DENIED_TEMPLATE,
                    {"reason": decision.reason, "route": route, "request_id": ensure_request_id(request)},
                    status=401 if actor is None else 403,
                )
            return view(request, *args, actor=actor, **kwargs)

        wrapped.route = route
        return wrapped

    return decorator
