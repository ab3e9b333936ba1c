"""Closed catalog of CRUD actions an entity can expose.

Codes are used as keys in route configurations and data access interface maps.
Extend cautiously: every custom database adaptation must cover the whole catalog.
"""
from __future__ import annotations
from enum import Enum
from typing import Dict, Optional, Tuple


class Action(str, Enum):
    FIND_MANY = 'find_many'
    FIND_BY_ID = 'find_by_id'
    CREATE_ONE = 'create_one'
    UPDATE_ONE = 'update_one'
    DELETE_ONE = 'delete_one'
    SAVE = 'save'


ALL_ACTIONS: Tuple[Action, ...] = tuple(Action)

# HTTP verb each generated action route answers to
ACTION_METHODS: Dict[Action, str] = {
    Action.FIND_MANY: 'GET',
    Action.FIND_BY_ID: 'GET',
    Action.CREATE_ONE: 'POST',
    Action.UPDATE_ONE: 'PUT',
    Action.DELETE_ONE: 'DELETE',
    Action.SAVE: 'PUT',
}

# Verbs accepted for extended (free-form) routes
ROUTE_METHODS = ('get', 'post', 'put', 'delete')


def to_action(key) -> Optional[Action]:
    """Return the Action for a member or its string code, None if unknown."""
    if isinstance(key, Action):
        return key
    if isinstance(key, str):
        try:
            return Action(key)
        except ValueError:
            return None
    return None


__all__ = ['Action', 'ALL_ACTIONS', 'ACTION_METHODS', 'ROUTE_METHODS', 'to_action']
