# portal_app/routes/auth.py

import hmac
from functools import wraps
from http import HTTPStatus

from flask import current_app, jsonify, request

ADMIN_KEY_HEADER = "X-Admin-Key"


def admin_key_matches(supplied):
    """Constant-time comparison of ``supplied`` against the configured ``ADMIN_KEY``."""
    expected = current_app.config.get("ADMIN_KEY") or ""
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def admin_key_required(f):
    """
    Decorator to require the shared admin key header.

    Requests without a matching ``X-Admin-Key`` get a 401 JSON body and the
    wrapped view is never called.
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not admin_key_matches(request.headers.get(ADMIN_KEY_HEADER)):
            current_app.logger.warning(
                "Rejected admin request to %s from %s",
                request.path,
                request.remote_addr,
                extra={"admin_path": request.path},
            )
            return jsonify({"error": "Unauthorized"}), HTTPStatus.UNAUTHORIZED
        return f(*args, **kwargs)

    return decorated_function
