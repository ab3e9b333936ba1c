"""Exception types raised by the endpoints generator while it is being configured.

Every builder operation raises synchronously; request-time failures go through
Flask's abort()/error handlers instead and never use these classes.
"""
from __future__ import annotations


class GeneratorError(Exception):
    """Base class for configuration errors."""


class SequenceError(GeneratorError):
    """An operation was called out of its required order."""


class ValidationError(GeneratorError, ValueError):
    """A value or structure passed to the builder is malformed."""


class DuplicateError(GeneratorError):
    """A uniqueness rule (entity name, data access module) was violated."""


class StateError(GeneratorError):
    """Required prior state is missing, e.g. no entity was configured."""


class ContractError(GeneratorError, TypeError):
    """A collaborator does not expose a required capability."""


class ConfigError(GeneratorError):
    """Required external configuration (e.g. the JWT secret) is missing."""


__all__ = [
    'GeneratorError',
    'SequenceError',
    'ValidationError',
    'DuplicateError',
    'StateError',
    'ContractError',
    'ConfigError',
]
