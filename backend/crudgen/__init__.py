from crudgen.constants.actions import Action
from crudgen.constants.route_config import OMITTED, AuthRequirement
from crudgen.errors import (
    ConfigError,
    ContractError,
    DuplicateError,
    GeneratorError,
    SequenceError,
    StateError,
    ValidationError,
)
from crudgen.generator import (
    PRIMARY_CALLBACKS_ADMIN,
    PRIMARY_CALLBACKS_ADMIN_AND_TOKEN,
    PRIMARY_CALLBACKS_NONE,
    EndpointsGenerator,
)
from crudgen.models import CompiledRoute, Dependent, EntityConfig, ExtendedRoute, RouteActionConfig

__all__ = [
    'Action',
    'AuthRequirement',
    'OMITTED',
    'EndpointsGenerator',
    'PRIMARY_CALLBACKS_NONE',
    'PRIMARY_CALLBACKS_ADMIN',
    'PRIMARY_CALLBACKS_ADMIN_AND_TOKEN',
    'EntityConfig',
    'Dependent',
    'ExtendedRoute',
    'RouteActionConfig',
    'CompiledRoute',
    'GeneratorError',
    'SequenceError',
    'ValidationError',
    'DuplicateError',
    'StateError',
    'ContractError',
    'ConfigError',
]
