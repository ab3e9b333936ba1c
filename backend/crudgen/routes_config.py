"""Merge partial per-action route configuration with the defaults table, then validate it.

Padding rules:
  * an action missing from the configuration gets its default entry;
  * a present entry gets missing fields from the action's default entry: `path` and
    `auth` when falsy (absent, None, '' or False), `middlewares` when absent or None
    (an explicit [] is kept);
  * entries set to OMITTED (False) are passed through untouched.

Validation rules:
  * keys outside the action catalog are rejected unless their value is OMITTED,
    all offending keys reported together;
  * each remaining entry fails fast on the first bad field.
"""
from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Dict, Optional

from crudgen.constants.actions import ALL_ACTIONS, to_action
from crudgen.constants.default_routes import DEFAULT_ROUTES_CONFIG, default_routes_config
from crudgen.constants.route_config import OMITTED, to_auth_requirement
from crudgen.errors import ValidationError
from crudgen.models import RouteActionConfig, RoutesConfig
from crudgen.utils.validation import all_callables, has_string_value


def _is_omitted(value: Any) -> bool:
    return value is OMITTED


def _as_fields(value: Any) -> Any:
    if isinstance(value, RouteActionConfig):
        return {'path': value.path, 'middlewares': value.middlewares, 'auth': value.auth}
    return value


def pad_routes_config(config: Mapping) -> Dict[Any, Any]:
    result: Dict[Any, Any] = {}
    for key, value in config.items():
        action = to_action(key)
        result[action if action is not None else key] = _as_fields(value)
    for action in ALL_ACTIONS:
        default = DEFAULT_ROUTES_CONFIG[action]
        if action not in result:
            result[action] = {'path': default.path, 'middlewares': list(default.middlewares), 'auth': default.auth}
            continue
        value = result[action]
        if _is_omitted(value) or not isinstance(value, Mapping):
            continue
        path = value.get('path')
        middlewares = value.get('middlewares')
        auth = value.get('auth')
        result[action] = {
            **value,
            'path': default.path if path is None or path == '' else path,
            'middlewares': list(default.middlewares) if middlewares is None else middlewares,
            'auth': auth or default.auth,
        }
    return result


def _field_error(entity: Optional[str], action, key: str) -> ValidationError:
    return ValidationError(
        f'Route configuration for entity [{entity}] and action [{action.value}] '
        f'has a missing or invalid value for key [{key}]'
    )


def validate_routes_config(config: Mapping, entity: Optional[str] = None) -> RoutesConfig:
    invalid = [str(key) for key, value in config.items() if to_action(key) is None and not _is_omitted(value)]
    if invalid:
        raise ValidationError(f"Provided route configuration key(s) [{', '.join(invalid)}] are invalid.")
    result: RoutesConfig = {}
    for key, value in config.items():
        action = to_action(key)
        if action is None or _is_omitted(value):
            result[action if action is not None else key] = value
            continue
        if not isinstance(value, Mapping):
            raise ValidationError(
                f'Route configuration for entity [{entity}] and action [{action.value}] must be a mapping or False'
            )
        path = value.get('path')
        if not has_string_value(path):
            raise _field_error(entity, action, 'path')
        middlewares = value.get('middlewares')
        if not isinstance(middlewares, (list, tuple)) or not all_callables(middlewares):
            raise _field_error(entity, action, 'middlewares')
        auth = to_auth_requirement(value.get('auth'))
        if auth is None:
            raise _field_error(entity, action, 'auth')
        result[action] = RouteActionConfig(path=path, middlewares=list(middlewares), auth=auth)
    return result


def resolve_routes_config(config: Optional[Mapping] = None, entity: Optional[str] = None) -> RoutesConfig:
    """Routes to store for an entity: the defaults table, or the padded and validated config."""
    if not config:
        return default_routes_config()
    if not isinstance(config, Mapping):
        raise ValidationError(f'Route configuration for entity [{entity}] must be a mapping of actions')
    return validate_routes_config(pad_routes_config(config), entity)


__all__ = ['pad_routes_config', 'validate_routes_config', 'resolve_routes_config']
