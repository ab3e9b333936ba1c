"""Entity endpoints generator: a chainable configuration builder that compiles CRUD routes.

Typical use:

    generator = EndpointsGenerator()
    generator.configure_entity('comments').add_data_access_module(Comment).done()
    (generator.configure_entity('users', is_primary_entity=True, is_admin_callback=is_admin)
        .add_data_access_module(User)
        .add_dependents(['comments'])
        .configure_routes({Action.FIND_MANY: {'auth': AuthRequirement.PROTECTED}})
        .extend_routes_with('get', '/export', [], export_users)
        .done())
    event_bus = asyncio.run(generator.create(app, jwt_secret='...'))

Chained calls target the entity opened by the last configure_entity() until done().
Custom databases must be declared (use_custom_database) and adapted (adapt_interface)
before any entity is configured.
"""
from __future__ import annotations
import inspect
import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from blinker import Namespace
from flask import Blueprint
from flask_jwt_extended import JWTManager, create_access_token

from crudgen.config import DEFAULT_TOKEN_PREFIX, DEFAULT_URL_PREFIX, get_settings
from crudgen.constants.actions import ACTION_METHODS, ALL_ACTIONS, ROUTE_METHODS
from crudgen.constants.default_routes import default_routes_config
from crudgen.constants.route_config import OMITTED, AuthRequirement
from crudgen.data_access import (
    STANDARD_INTERFACE,
    DataAccess,
    SQLAlchemyDataAccess,
    build_session_factory,
    is_mapped_model,
    is_valid_custom_module,
    validate_interface_map,
)
from crudgen.errors import ConfigError, ContractError, DuplicateError, SequenceError, StateError, ValidationError
from crudgen.handlers import chain_handlers, make_action_handler
from crudgen.middlewares.auth import make_admin_only_middleware, make_protect_middleware
from crudgen.middlewares.errors import default_error_handler, default_not_found_handler
from crudgen.middlewares.request_log import log_request
from crudgen.models import CompiledRoute, Dependent, EntityConfig, ExtendedRoute
from crudgen.routes_config import resolve_routes_config
from crudgen.utils.validation import all_callables, has_boolean_value, has_callable, has_string_value, object_has_method

logger = logging.getLogger(__name__)

# Callbacks a primary entity must provide, by policy
PRIMARY_CALLBACKS_NONE: Tuple[str, ...] = ()
PRIMARY_CALLBACKS_ADMIN: Tuple[str, ...] = ('is_admin_callback',)
PRIMARY_CALLBACKS_ADMIN_AND_TOKEN: Tuple[str, ...] = ('is_admin_callback', 'create_token_callback')

REQUIRED_APP_CAPABILITIES = ('register_blueprint', 'register_error_handler', 'after_request', 'run')
REQUIRED_APP_ATTRIBUTES = ('config', 'extensions')


class AppHandle(Protocol):
    """What create() needs from the application object (a Flask app satisfies it)."""

    config: MutableMapping
    extensions: Mapping

    def register_blueprint(self, blueprint, **options): ...

    def register_error_handler(self, code_or_exception, f): ...

    def after_request(self, f): ...

    def run(self, *args, **kwargs): ...


async def _noop_initialize(env, event_bus):
    return None


class EndpointsGenerator:

    def __init__(self, required_primary_callbacks: Iterable[str] = PRIMARY_CALLBACKS_NONE):
        self.required_primary_callbacks = tuple(required_primary_callbacks)
        unknown = set(self.required_primary_callbacks) - set(PRIMARY_CALLBACKS_ADMIN_AND_TOKEN)
        if unknown:
            raise ValidationError(f'Unknown primary entity callback(s) {sorted(unknown)}')
        self.reset()

    def reset(self):
        """Drop every declaration and configured entity."""
        self.using_custom_database = False
        self.using_custom_auth = False
        self.custom_auth_middlewares: Dict[AuthRequirement, Callable] = {}
        self.adapted_interface: Dict = {}
        self.entity_configurations: Dict[str, EntityConfig] = {}
        self.currently_configuring: Optional[str] = None
        self.event_bus = Namespace()
        self._session_factory = None

    # ---------- Queries ---------- #

    def get_currently_configuring_entity(self) -> Optional[str]:
        return self.currently_configuring

    def get_db_interface(self) -> Dict:
        return self.adapted_interface

    def get_entity_configurations(self) -> Dict[str, EntityConfig]:
        return self.entity_configurations

    def get_entity_names(self) -> Dict[str, str]:
        return {key: cfg.name for key, cfg in self.entity_configurations.items()}

    def is_interface_adapted(self) -> bool:
        return bool(self.adapted_interface) and len(self.adapted_interface) == len(ALL_ACTIONS)

    # ---------- Database / auth declarations ---------- #

    def use_custom_database(self):
        if self.entity_configurations:
            raise SequenceError('[use_custom_database] must be called before any entity is configured.')
        self.using_custom_database = True
        return self

    def adapt_interface(self, interface_map: Mapping):
        """Map every action to a method name on the client's data access objects, or False.

        e.g. {Action.FIND_MANY: 'find', Action.FIND_BY_ID: 'find_by_id', Action.CREATE_ONE: 'create',
              Action.UPDATE_ONE: 'update', Action.DELETE_ONE: 'delete', Action.SAVE: False}
        """
        if not self.using_custom_database:
            raise SequenceError('[adapt_interface] requires [use_custom_database] to be called first.')
        self.adapted_interface = validate_interface_map(interface_map)
        return self

    def use_custom_auth(self, protected: Callable, admin_only: Callable):
        """Replace the JWT middlewares used for PROTECTED and ADMIN_ONLY routes."""
        if not has_callable(protected) or not has_callable(admin_only):
            raise ValidationError('[use_custom_auth] requires callable [protected] and [admin_only] middlewares.')
        self.using_custom_auth = True
        self.custom_auth_middlewares = {
            AuthRequirement.PROTECTED: protected,
            AuthRequirement.ADMIN_ONLY: admin_only,
        }
        return self

    # ---------- Entity chain ---------- #

    def _entity_in_progress(self, method_name: str) -> EntityConfig:
        if not self.currently_configuring:
            raise SequenceError(f'Chained configuration method [{method_name}] requires calling [configure_entity] first.')
        return self.entity_configurations[self.currently_configuring]

    def configure_entity(self, name: str, *, identifier_field: str = 'id', is_primary_entity: bool = False,
                         is_admin_callback: Optional[Callable] = None, create_token_callback: Optional[Callable] = None):
        if not has_string_value(name):
            raise ValidationError('A non-empty entity [name] is required by [configure_entity].')
        if self.using_custom_database and not self.is_interface_adapted():
            raise SequenceError(
                'Using a custom database requires adapting its interface with [adapt_interface] before configuring entities.'
            )
        if name == self.currently_configuring or name in self.entity_configurations:
            raise DuplicateError(f'Entity [{name}] can only be configured once.')
        entity = EntityConfig(
            name=name,
            identifier_field=identifier_field if has_string_value(identifier_field) else 'id',
            is_primary_entity=is_primary_entity if has_boolean_value(is_primary_entity) else False,
            is_admin_callback=is_admin_callback if has_callable(is_admin_callback) else None,
            create_token_callback=create_token_callback if has_callable(create_token_callback) else None,
        )
        if entity.is_primary_entity:
            missing = [cb for cb in self.required_primary_callbacks if getattr(entity, cb) is None]
            if missing:
                raise ValidationError(f"Primary entity [{name}] requires callable(s) [{', '.join(missing)}].")
        self.entity_configurations[name] = entity
        self.currently_configuring = name
        logger.debug('Configuring entity %s (primary=%s)', name, entity.is_primary_entity)
        return self

    def done(self):
        if not self.currently_configuring:
            raise SequenceError('Chained method [done] must follow an entity configuration.')
        self.currently_configuring = None
        return self

    def add_data_access_module(self, module: Any):
        entity = self._entity_in_progress('add_data_access_module')
        if self.using_custom_database and not is_valid_custom_module(module, self.adapted_interface):
            raise ValidationError(
                f'Using a custom database requires a callable or an object exposing the adapted methods '
                f'as data access module for entity [{entity.name}].'
            )
        if entity.data_access_module is not None:
            raise DuplicateError(f'Entity [{entity.name}] can only be given a data access module once.')
        entity.data_access_module = module
        return self

    def add_dependents(self, dependents: Iterable):
        entity = self._entity_in_progress('add_dependents')
        if isinstance(dependents, (str, Mapping)) or not isinstance(dependents, (list, tuple)):
            raise ValidationError('[add_dependents] expects a list of entity names or {entity, force_delete} mappings.')
        resolved: List[Dependent] = []
        for item in dependents:
            if isinstance(item, Dependent):
                item = {'entity': item.entity, 'force_delete': item.force_delete}
            if isinstance(item, str):
                name, force_delete = item, False
            elif isinstance(item, Mapping):
                if 'entity' not in item or 'force_delete' not in item:
                    raise ValidationError(
                        'Dependent mappings passed to [add_dependents] require both [entity] and [force_delete] keys.'
                    )
                name, force_delete = item['entity'], item['force_delete']
            else:
                raise ValidationError(f'Invalid dependent {item!r} passed to [add_dependents].')
            if not isinstance(name, str) or name not in self.entity_configurations:
                raise ValidationError(f'Unknown dependent entity [{name}] passed to [add_dependents].')
            resolved.append(Dependent(entity=name, force_delete=force_delete))
        entity.dependents = resolved
        return self

    def configure_routes(self, routes_config: Optional[Mapping] = None):
        """Optional per-action route settings; omitted actions use the defaults table.

        Each action maps to {'path', 'middlewares', 'auth'} (any field may be left out)
        or to False to skip generating that route.
        """
        entity = self._entity_in_progress('configure_routes')
        entity.routes = resolve_routes_config(routes_config, entity.name)
        return self

    def extend_routes_with(self, method: str, path: str, middlewares: Iterable[Callable], handler: Callable):
        """Add a free-form route; `handler` receives the URL view args as keyword arguments."""
        entity = self._entity_in_progress('extend_routes_with')
        if not isinstance(method, str) or method.lower() not in ROUTE_METHODS:
            raise ValidationError(f'Invalid value provided for argument [method] of [extend_routes_with]: {method!r}')
        if not has_string_value(path):
            raise ValidationError('Invalid value provided for argument [path] of [extend_routes_with].')
        if not isinstance(middlewares, (list, tuple)) or not all_callables(middlewares):
            raise ValidationError('Argument [middlewares] of [extend_routes_with] must be a list of callables.')
        if not has_callable(handler):
            raise ValidationError('Invalid value provided for argument [handler] of [extend_routes_with].')
        entity.extended_routes.append(
            ExtendedRoute(method=method.lower(), path=path, middlewares=list(middlewares), handler=handler)
        )
        return self

    # ---------- Assembly ---------- #

    def _primary_entity(self) -> EntityConfig:
        primaries = [cfg for cfg in self.entity_configurations.values() if cfg.is_primary_entity]
        if len(primaries) != 1:
            names = ', '.join(cfg.name for cfg in primaries)
            raise ValidationError(
                f'Exactly one primary entity is required, found {len(primaries)}' + (f' [{names}]' if names else '') + '.'
            )
        return primaries[0]

    def _validate_data_access_modules(self):
        invalid = [
            name for name, cfg in self.entity_configurations.items()
            if not is_valid_custom_module(cfg.data_access_module, self.adapted_interface)
        ]
        if invalid:
            raise ValidationError(
                f"Using a custom database requires a data access module for every entity. "
                f"Missing or invalid modules for entities [{', '.join(invalid)}]."
            )

    def _data_access_for(self, entity: EntityConfig, session_factory=None) -> Optional[DataAccess]:
        module = entity.data_access_module
        if self.using_custom_database:
            return DataAccess(module, self.adapted_interface)
        if module is None:
            return None
        if is_mapped_model(module):
            if session_factory is None:
                if self._session_factory is None:
                    self._session_factory = build_session_factory(get_settings().database_url)
                session_factory = self._session_factory
            return DataAccess(SQLAlchemyDataAccess(module, session_factory, entity.identifier_field), STANDARD_INTERFACE)
        return DataAccess(module, STANDARD_INTERFACE)

    def _auth_middlewares(self, primary: EntityConfig, primary_access: Optional[DataAccess]) -> Dict[AuthRequirement, List[Callable]]:
        if self.using_custom_auth:
            protected = self.custom_auth_middlewares[AuthRequirement.PROTECTED]
            admin_only = self.custom_auth_middlewares[AuthRequirement.ADMIN_ONLY]
        else:
            protected = make_protect_middleware(primary, primary_access)
            admin_only = make_admin_only_middleware(primary, primary_access)
        return {
            AuthRequirement.NONE: [],
            AuthRequirement.PROTECTED: [protected],
            AuthRequirement.ADMIN_ONLY: [admin_only],
            AuthRequirement.CUSTOM_MIDDLEWARES: [],
        }

    def compile_plan(self, session_factory=None) -> Tuple[CompiledRoute, ...]:
        """Resolve every entity's routes into ordered handler chains.

        Chains run [auth middlewares..., route middlewares..., handler]. Actions that
        are omitted, or that the entity's data access marks unsupported, are skipped.
        """
        primary = self._primary_entity()
        access = {name: self._data_access_for(cfg, session_factory) for name, cfg in self.entity_configurations.items()}
        auth_chains = self._auth_middlewares(primary, access[primary.name])
        plan: List[CompiledRoute] = []
        for entity in self.entity_configurations.values():
            routes = entity.routes if entity.routes is not None else default_routes_config()
            data_access = access[entity.name]
            for action in ALL_ACTIONS:
                route = routes.get(action, OMITTED)
                if route is OMITTED:
                    continue
                if data_access is not None and not data_access.supports(action):
                    logger.debug('Skipping %s route for %s: unsupported by data access', action.value, entity.name)
                    continue
                handler = make_action_handler(entity, action, data_access, self.event_bus)
                plan.append(CompiledRoute(
                    entity=entity.name,
                    endpoint=action.value,
                    method=ACTION_METHODS[action],
                    path=route.path,
                    handlers=tuple(auth_chains[route.auth] + list(route.middlewares) + [handler]),
                    action=action,
                ))
            for index, extension in enumerate(entity.extended_routes):
                plan.append(CompiledRoute(
                    entity=entity.name,
                    endpoint=f'extended_{index}',
                    method=extension.method.upper(),
                    path=extension.path,
                    handlers=tuple(extension.middlewares) + (extension.handler,),
                ))
        return tuple(plan)

    def _resolve_overrides(self, overrides: Optional[Mapping], settings) -> Dict[str, Any]:
        overrides = overrides or {}
        env = overrides.get('env')
        token_prefix = overrides.get('token_prefix')
        url_prefix = overrides.get('url_prefix')
        initialize = overrides.get('initialize_app_callback')
        return {
            'error_handler': overrides.get('error_handler') if has_callable(overrides.get('error_handler')) else default_error_handler,
            'not_found_handler': overrides.get('not_found_handler') if has_callable(overrides.get('not_found_handler')) else default_not_found_handler,
            'env': env if has_string_value(env) else settings.env,
            'initialize_app_callback': initialize if has_callable(initialize) else _noop_initialize,
            'token_prefix': token_prefix if has_string_value(token_prefix) else DEFAULT_TOKEN_PREFIX,
            'url_prefix': url_prefix.rstrip('/') if isinstance(url_prefix, str) else DEFAULT_URL_PREFIX,
            'session_factory': overrides.get('session_factory'),
        }

    @staticmethod
    def _blueprints(plan: Iterable[CompiledRoute]) -> Dict[str, Blueprint]:
        blueprints: Dict[str, Blueprint] = {}
        for route in plan:
            bp = blueprints.get(route.entity)
            if bp is None:
                bp = blueprints[route.entity] = Blueprint(route.entity.replace('.', '_'), __name__)
            bp.add_url_rule(
                route.path,
                endpoint=route.endpoint,
                view_func=chain_handlers(route.handlers, route.endpoint),
                methods=[route.method],
            )
        return blueprints

    async def create(self, app: AppHandle, jwt_secret: Optional[str] = None, overrides: Optional[Mapping] = None) -> Namespace:
        """Validate the registry, mount every entity router on `app` and return the event bus.

        overrides: error_handler, not_found_handler, env ('dev'), initialize_app_callback
        (awaited with (env, event_bus)), token_prefix ('Bearer'), url_prefix ('/api'),
        session_factory (SQLAlchemy sessions for mapped-model modules).
        """
        self.currently_configuring = None
        if not self.entity_configurations:
            raise StateError('Entities must be configured with [configure_entity] before calling [create].')
        missing = [name for name in REQUIRED_APP_CAPABILITIES if not object_has_method(app, name)]
        missing += [name for name in REQUIRED_APP_ATTRIBUTES if not hasattr(app, name)]
        if missing:
            raise ContractError(f"Application passed to [create] is missing required capabilities or attributes [{', '.join(missing)}].")
        settings = get_settings()
        secret = jwt_secret if has_string_value(jwt_secret) else settings.jwt_secret_key
        if not self.using_custom_auth and not has_string_value(secret):
            raise ConfigError('A JWT secret is required unless custom auth is used (argument [jwt_secret] or JWT_SECRET_KEY).')
        self._primary_entity()
        if self.using_custom_database:
            self._validate_data_access_modules()
        options = self._resolve_overrides(overrides, settings)

        if not self.using_custom_auth:
            app.config['JWT_SECRET_KEY'] = secret
            app.config['JWT_HEADER_TYPE'] = options['token_prefix']
            if 'flask-jwt-extended' not in app.extensions:
                JWTManager(app)
        if options['env'] == 'dev':
            app.after_request(log_request)

        result = options['initialize_app_callback'](options['env'], self.event_bus)
        if inspect.isawaitable(result):
            await result

        plan = self.compile_plan(options['session_factory'])
        for entity_name, blueprint in self._blueprints(plan).items():
            app.register_blueprint(blueprint, url_prefix=f"{options['url_prefix']}/{entity_name}")
        app.register_error_handler(404, options['not_found_handler'])
        app.register_error_handler(Exception, options['error_handler'])
        logger.info('Mounted %d routes for %d entities', len(plan), len(self.entity_configurations))
        return self.event_bus

    def issue_token(self, record: Mapping) -> str:
        """Token for a primary entity record; needs an application context when using JWT."""
        primary = self._primary_entity()
        if primary.create_token_callback is not None:
            return primary.create_token_callback(record)
        return create_access_token(identity=str(record[primary.identifier_field]))


__all__ = [
    'EndpointsGenerator',
    'AppHandle',
    'PRIMARY_CALLBACKS_NONE',
    'PRIMARY_CALLBACKS_ADMIN',
    'PRIMARY_CALLBACKS_ADMIN_AND_TOKEN',
]
