"""Data access adaptation: how generated handlers reach an entity's data.

A data access module is either
  * a capability object whose methods are named by the interface map
    (e.g. {Action.FIND_MANY: 'find', ..., Action.SAVE: False}), or
  * a plain callable invoked as module(action, **kwargs).

Without a custom database, a SQLAlchemy mapped class may be registered instead and
is wrapped in SQLAlchemyDataAccess, which speaks the standard interface.

Keyword conventions per action:
  find_many(filters, limit, offset)   -> list of records
  find_by_id(identifier)              -> record or None
  create_one(data)                    -> record
  update_one(identifier, data)        -> record or None
  delete_one(identifier, dependents)  -> record (truthy) or None
  save(data)                          -> record
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy import create_engine, inspect as sa_inspect, select
from sqlalchemy.orm import Mapper, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from crudgen.constants.actions import ALL_ACTIONS, Action, to_action
from crudgen.errors import ValidationError
from crudgen.models import Dependent
from crudgen.utils.validation import has_callable, has_nonempty_mapping, has_string_value, object_has_method

InterfaceMap = Dict[Action, Union[str, bool]]

# Interface used when no custom database is declared: methods named after the actions
STANDARD_INTERFACE: InterfaceMap = {action: action.value for action in ALL_ACTIONS}


def validate_interface_map(interface_map: Mapping) -> InterfaceMap:
    """Resolve a client interface map, reporting every missing or invalid action at once."""
    if not has_nonempty_mapping(interface_map):
        raise ValidationError('A non-empty mapping of actions to method names is required to adapt the database interface.')
    normalized = {}
    for key, value in interface_map.items():
        action = to_action(key)
        if action is not None:
            normalized[action] = value
    result: InterfaceMap = {}
    missing_or_invalid: List[str] = []
    for action in ALL_ACTIONS:
        value = normalized.get(action)
        if value is False or has_string_value(value):
            result[action] = value
        else:
            missing_or_invalid.append(action.value)
    if missing_or_invalid:
        raise ValidationError(
            f"Database interface adaptation failed. Adaptation for action(s) [{', '.join(missing_or_invalid)}] "
            'are either missing or have an invalid value.'
        )
    return result


def supported_methods(interface_map: InterfaceMap) -> List[str]:
    return [name for name in interface_map.values() if name is not False]


def is_capability_object(module: Any, interface_map: InterfaceMap) -> bool:
    methods = supported_methods(interface_map)
    # nothing to resolve when every action is unsupported
    return module is not None and all(object_has_method(module, m) for m in methods)


def is_valid_custom_module(module: Any, interface_map: InterfaceMap) -> bool:
    return is_capability_object(module, interface_map) or has_callable(module)


def is_mapped_model(module: Any) -> bool:
    return isinstance(module, type) and isinstance(sa_inspect(module, raiseerr=False), Mapper)


class DataAccess:
    """Uniform calling convention over a capability object or a dispatching callable."""

    def __init__(self, module: Any, interface_map: InterfaceMap):
        self.module = module
        self.interface_map = interface_map

    def supports(self, action: Action) -> bool:
        return self.interface_map.get(action, False) is not False

    def call(self, action: Action, **kwargs):
        method_name = self.interface_map.get(action, False)
        if method_name is False:
            raise NotImplementedError(f'Action [{action.value}] is not supported by this data access module')
        method = getattr(self.module, method_name, None)
        if callable(method):
            return method(**kwargs)
        return self.module(action, **kwargs)


def build_session_factory(database_url: str) -> scoped_session:
    if database_url.endswith(':memory:'):
        # Single shared in-memory SQLite database across all sessions
        engine = create_engine(
            database_url,
            echo=False,
            future=True,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url, echo=False, future=True)
    return scoped_session(sessionmaker(bind=engine, expire_on_commit=False, autoflush=False))


class SQLAlchemyDataAccess:
    """Standard interface over a SQLAlchemy mapped class.

    Dependents are accepted on delete for interface parity; cascades are left to the
    model's relationship configuration.
    """

    def __init__(self, model, session_factory, identifier_field: str = 'id'):
        self.model = model
        self.session_factory = session_factory
        self.identifier_field = identifier_field
        self._columns = {attr.key: attr for attr in sa_inspect(model).column_attrs}

    def _session(self):
        return self.session_factory()

    def _commit(self, session):
        # a failed flush leaves the shared scoped session unusable until rolled back
        try:
            session.commit()
        except Exception:
            session.rollback()
            raise

    def _to_dict(self, obj) -> Dict[str, Any]:
        return {key: getattr(obj, key) for key in self._columns}

    def _writable(self, data: Optional[Mapping]) -> Dict[str, Any]:
        return {k: v for k, v in (data or {}).items() if k in self._columns}

    def _coerce_identifier(self, identifier):
        column = self._columns[self.identifier_field].columns[0]
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            return identifier
        if isinstance(identifier, python_type):
            return identifier
        return python_type(identifier)

    def _get(self, session, identifier):
        try:
            identifier = self._coerce_identifier(identifier)
        except (TypeError, ValueError):
            return None
        column = getattr(self.model, self.identifier_field)
        return session.execute(select(self.model).where(column == identifier)).scalar_one_or_none()

    def find_many(self, filters: Optional[Mapping] = None, limit: Optional[int] = None, offset: int = 0):
        session = self._session()
        q = select(self.model)
        for key, value in (filters or {}).items():
            if key in self._columns:
                q = q.where(getattr(self.model, key) == value)
        q = q.order_by(getattr(self.model, self.identifier_field).asc()).offset(offset)
        if limit is not None:
            q = q.limit(limit)
        return [self._to_dict(row) for row in session.execute(q).scalars()]

    def find_by_id(self, identifier):
        obj = self._get(self._session(), identifier)
        return self._to_dict(obj) if obj is not None else None

    def create_one(self, data: Mapping):
        session = self._session()
        obj = self.model(**self._writable(data))
        session.add(obj)
        self._commit(session)
        return self._to_dict(obj)

    def update_one(self, identifier, data: Mapping):
        session = self._session()
        obj = self._get(session, identifier)
        if obj is None:
            return None
        for key, value in self._writable(data).items():
            if key != self.identifier_field:
                setattr(obj, key, value)
        self._commit(session)
        return self._to_dict(obj)

    def delete_one(self, identifier, dependents: Iterable[Dependent] = ()):
        session = self._session()
        obj = self._get(session, identifier)
        if obj is None:
            return None
        snapshot = self._to_dict(obj)
        session.delete(obj)
        self._commit(session)
        return snapshot

    def save(self, data: Mapping):
        identifier = (data or {}).get(self.identifier_field)
        if identifier is not None:
            updated = self.update_one(identifier, data)
            if updated is not None:
                return updated
        return self.create_one(data)


__all__ = [
    'InterfaceMap',
    'STANDARD_INTERFACE',
    'validate_interface_map',
    'is_capability_object',
    'is_valid_custom_module',
    'is_mapped_model',
    'DataAccess',
    'build_session_factory',
    'SQLAlchemyDataAccess',
]
