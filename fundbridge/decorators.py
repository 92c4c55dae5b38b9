"""
Helpers shared by the API blueprints.

- callable_endpoint: parses the JSON body and hands it to the view as `data`.
  Authentication is checked inside the services so the error message can
  name the operation.
- protect_session_callers: CSRF check for cookie-session callers; requests
  carrying a bearer token are exempt (the browser never attaches those).
"""

from functools import wraps

from flask import current_app, request

from fundbridge.errors import InvalidArgument
from fundbridge.extensions import csrf
from fundbridge.services.firebase_service import bearer_token


def callable_endpoint(f):
    """Pass the request's JSON object (or {}) to the view as `data`."""

    @wraps(f)
    def decorated(*args, **kwargs):
        if request.method == "GET" or not request.get_data():
            data = {}
        else:
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                raise InvalidArgument("Request body must be a JSON object.")
        # Callable clients may wrap the payload as {"data": {...}}
        if set(data) == {"data"} and isinstance(data["data"], dict):
            data = data["data"]
        return f(data, *args, **kwargs)

    return decorated


def protect_session_callers():
    """Before-request hook: enforce CSRF unless the caller sent a bearer token."""
    if not current_app.config.get("WTF_CSRF_ENABLED", True):
        return
    if bearer_token(request):
        return
    csrf.protect()
