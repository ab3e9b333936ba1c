"""Configuration records accumulated by the endpoints generator."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from crudgen.constants.actions import Action
from crudgen.constants.route_config import AuthRequirement


@dataclass
class RouteActionConfig:
    path: str
    middlewares: List[Callable] = field(default_factory=list)
    auth: AuthRequirement = AuthRequirement.NONE


@dataclass
class Dependent:
    entity: str
    force_delete: bool = False


@dataclass
class ExtendedRoute:
    method: str
    path: str
    middlewares: List[Callable]
    handler: Callable


# Action -> route config, or False when the route is omitted
RoutesConfig = Dict[Union[Action, str], Union[RouteActionConfig, bool]]


@dataclass
class EntityConfig:
    name: str
    identifier_field: str = 'id'
    is_primary_entity: bool = False
    is_admin_callback: Optional[Callable[[Any], bool]] = None
    create_token_callback: Optional[Callable[[Any], str]] = None
    data_access_module: Any = None
    dependents: Optional[List[Dependent]] = None
    routes: Optional[RoutesConfig] = None
    extended_routes: List[ExtendedRoute] = field(default_factory=list)


@dataclass(frozen=True)
class CompiledRoute:
    """One mountable route: handlers run in order, the last one produces the response."""
    entity: str
    endpoint: str
    method: str
    path: str
    handlers: Tuple[Callable, ...]
    action: Optional[Action] = None


__all__ = ['RouteActionConfig', 'Dependent', 'ExtendedRoute', 'RoutesConfig', 'EntityConfig', 'CompiledRoute']
