from __future__ import annotations
from flask import current_app, request


def log_request(response):
    """after_request hook used in the dev environment: one line per request."""
    current_app.logger.info('%s %s %s', request.method, request.full_path.rstrip('?'), response.status_code)
    return response
