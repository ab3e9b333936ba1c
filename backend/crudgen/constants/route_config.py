from __future__ import annotations
from enum import Enum
from typing import Optional

# Route-level sentinel: the action route is intentionally not generated
OMITTED = False


class AuthRequirement(str, Enum):
    NONE = 'none'
    PROTECTED = 'protected'
    ADMIN_ONLY = 'admin_only'
    CUSTOM_MIDDLEWARES = 'custom_middlewares'


def to_auth_requirement(value) -> Optional[AuthRequirement]:
    """Normalize an auth option; literal False means no auth. None if unrecognized."""
    if value is False:
        return AuthRequirement.NONE
    if isinstance(value, AuthRequirement):
        return value
    if isinstance(value, str):
        try:
            return AuthRequirement(value)
        except ValueError:
            return None
    return None


__all__ = ['OMITTED', 'AuthRequirement', 'to_auth_requirement']
