"""Route handler factory for catalog actions, plus middleware chain composition.

Generated handlers take the URL view args as keyword arguments and talk to the entity's
data access through DataAccess.call(). After a successful write they send the blinker
signal named after the action, with the entity name as sender and the record as `record`.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Optional, Sequence

from blinker import Namespace
from flask import abort, request

from crudgen.config.pagination import split_list_args
from crudgen.constants.actions import Action
from crudgen.data_access import DataAccess
from crudgen.models import EntityConfig


def build_list_payload(rows: list, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }


def _identifier(entity: EntityConfig, view_args: Dict[str, Any]):
    if entity.identifier_field in view_args:
        return view_args[entity.identifier_field]
    if 'id' in view_args:
        return view_args['id']
    abort(400, description=f'{entity.name} identifier missing from route path')


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        abort(400, description='JSON object body required')
    return data


def make_action_handler(entity: EntityConfig, action: Action, data_access: Optional[DataAccess],
                        event_bus: Namespace) -> Callable[..., Any]:
    def emit(record):
        event_bus.signal(action.value).send(entity.name, record=record)

    def find_many(**view_args):
        try:
            filters, limit, offset = split_list_args(request.args)
        except ValueError as e:
            abort(400, description=str(e))
        rows = list(data_access.call(Action.FIND_MANY, filters=filters, limit=limit, offset=offset))
        return build_list_payload(rows, limit, offset)

    def find_by_id(**view_args):
        identifier = _identifier(entity, view_args)
        record = data_access.call(Action.FIND_BY_ID, identifier=identifier)
        if record is None:
            abort(404, description=f'{entity.name} {identifier} not found')
        return record

    def create_one(**view_args):
        record = data_access.call(Action.CREATE_ONE, data=_json_body())
        emit(record)
        return record, 201

    def update_one(**view_args):
        identifier = _identifier(entity, view_args)
        record = data_access.call(Action.UPDATE_ONE, identifier=identifier, data=_json_body())
        if record is None:
            abort(404, description=f'{entity.name} {identifier} not found')
        emit(record)
        return record

    def delete_one(**view_args):
        identifier = _identifier(entity, view_args)
        record = data_access.call(Action.DELETE_ONE, identifier=identifier, dependents=list(entity.dependents or []))
        if not record:
            abort(404, description=f'{entity.name} {identifier} not found')
        emit(record)
        return '', 204

    def save(**view_args):
        record = data_access.call(Action.SAVE, data=_json_body())
        emit(record)
        return record

    def not_implemented(**view_args):
        abort(501, description=f'No data access module configured for entity [{entity.name}]')

    if data_access is None:
        return not_implemented
    handlers = {
        Action.FIND_MANY: find_many,
        Action.FIND_BY_ID: find_by_id,
        Action.CREATE_ONE: create_one,
        Action.UPDATE_ONE: update_one,
        Action.DELETE_ONE: delete_one,
        Action.SAVE: save,
    }
    return handlers[action]


def chain_handlers(handlers: Sequence[Callable], name: str) -> Callable[..., Any]:
    """Compose [middlewares..., handler] into one Flask view function.

    Middlewares are called without arguments; the first non-None return value
    short-circuits the chain and becomes the response.
    """
    *middlewares, handler = handlers

    def view(**view_args):
        for middleware in middlewares:
            rv = middleware()
            if rv is not None:
                return rv
        return handler(**view_args)

    view.__name__ = name
    return view


__all__ = ['build_list_payload', 'make_action_handler', 'chain_handlers']
