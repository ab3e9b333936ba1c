"""Terminal error handlers mounted after every generated entity router.

Both produce the standardized JSON error shape:
    {"error": {"status": <int>, "title": <str>, "detail": <str>}}
"""
from __future__ import annotations
from flask import current_app, request
from werkzeug.exceptions import HTTPException


def _error_payload(status: int, title: str, detail: str):
    return {'error': {'status': status, 'title': title, 'detail': detail}}, status


def default_not_found_handler(e):
    detail = getattr(e, 'description', None) or f'Not Found - {request.path}'
    return _error_payload(404, 'Not Found', detail)


def default_error_handler(e):
    if isinstance(e, HTTPException):
        return _error_payload(e.code, e.name, e.description)
    current_app.logger.exception('Unhandled exception')
    return _error_payload(500, 'Internal Server Error', 'Unexpected error')


__all__ = ['default_not_found_handler', 'default_error_handler']
