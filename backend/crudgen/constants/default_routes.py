"""Default route configuration applied to every action an entity does not configure."""
from __future__ import annotations
from typing import Dict

from crudgen.constants.actions import Action
from crudgen.constants.route_config import AuthRequirement
from crudgen.models import RouteActionConfig

COLLECTION_PATH = '/'
MEMBER_PATH = '/<id>'

DEFAULT_ROUTES_CONFIG: Dict[Action, RouteActionConfig] = {
    Action.FIND_MANY: RouteActionConfig(path=COLLECTION_PATH, middlewares=[], auth=AuthRequirement.NONE),
    Action.FIND_BY_ID: RouteActionConfig(path=MEMBER_PATH, middlewares=[], auth=AuthRequirement.NONE),
    Action.CREATE_ONE: RouteActionConfig(path=COLLECTION_PATH, middlewares=[], auth=AuthRequirement.ADMIN_ONLY),
    Action.UPDATE_ONE: RouteActionConfig(path=MEMBER_PATH, middlewares=[], auth=AuthRequirement.ADMIN_ONLY),
    Action.DELETE_ONE: RouteActionConfig(path=MEMBER_PATH, middlewares=[], auth=AuthRequirement.ADMIN_ONLY),
    Action.SAVE: RouteActionConfig(path=COLLECTION_PATH, middlewares=[], auth=AuthRequirement.ADMIN_ONLY),
}


def default_routes_config() -> Dict[Action, RouteActionConfig]:
    """Fresh copy of the defaults table (entries and middleware lists are not shared)."""
    return {
        action: RouteActionConfig(path=cfg.path, middlewares=list(cfg.middlewares), auth=cfg.auth)
        for action, cfg in DEFAULT_ROUTES_CONFIG.items()
    }


__all__ = ['COLLECTION_PATH', 'MEMBER_PATH', 'DEFAULT_ROUTES_CONFIG', 'default_routes_config']
