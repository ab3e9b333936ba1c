"""Default authentication middlewares built on flask-jwt-extended.

A middleware is a zero-argument callable run before the route handler. It returns None
to continue the chain; any other value is used as the response. These two abort()
instead of returning a response.

The authenticated primary entity record is stored on flask.g under the primary
entity's name (e.g. g.users).
"""
from __future__ import annotations
from typing import Callable, Optional

from flask import abort, g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from crudgen.constants.actions import Action
from crudgen.data_access import DataAccess
from crudgen.models import EntityConfig


def _resolve_identity(primary: EntityConfig, data_access: Optional[DataAccess], identity):
    if data_access is not None and data_access.supports(Action.FIND_BY_ID):
        return data_access.call(Action.FIND_BY_ID, identifier=identity)
    return {primary.identifier_field: identity}


def make_protect_middleware(primary: EntityConfig, data_access: Optional[DataAccess]) -> Callable[[], None]:
    def protect():
        verify_jwt_in_request()
        record = _resolve_identity(primary, data_access, get_jwt_identity())
        if record is None:
            abort(401, description=f'Unknown {primary.name} for provided token')
        setattr(g, primary.name, record)

    protect.__name__ = f'protect_{primary.name}'
    return protect


def make_admin_only_middleware(primary: EntityConfig, data_access: Optional[DataAccess]) -> Callable[[], None]:
    protect = make_protect_middleware(primary, data_access)

    def admin_only():
        protect()
        is_admin = primary.is_admin_callback
        if is_admin is None or not is_admin(getattr(g, primary.name)):
            abort(403, description='Admin privileges required')

    admin_only.__name__ = f'admin_only_{primary.name}'
    return admin_only


__all__ = ['make_protect_middleware', 'make_admin_only_middleware']
