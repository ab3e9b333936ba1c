import pytest
from crudgen import OMITTED, Action, AuthRequirement, RouteActionConfig, SequenceError, ValidationError
from crudgen.constants.default_routes import DEFAULT_ROUTES_CONFIG, default_routes_config
from crudgen.routes_config import pad_routes_config


def _mw():
    return None


def _routes(generator, name='products'):
    return generator.get_entity_configurations()[name].routes


def test_configure_routes_without_entity_fails(generator):
    with pytest.raises(SequenceError):
        generator.configure_routes({})


@pytest.mark.parametrize('config', [None, {}])
def test_empty_config_uses_defaults(generator, config):
    generator.configure_entity('products').configure_routes(config)
    assert _routes(generator) == DEFAULT_ROUTES_CONFIG


def test_defaults_are_not_shared_between_entities(generator):
    generator.configure_entity('products').configure_routes().done()
    generator.configure_entity('comments').configure_routes().done()
    _routes(generator, 'products')[Action.FIND_MANY].middlewares.append(_mw)
    assert _routes(generator, 'comments')[Action.FIND_MANY].middlewares == []
    assert DEFAULT_ROUTES_CONFIG[Action.FIND_MANY].middlewares == []


def test_partial_action_config_is_padded(generator):
    generator.configure_entity('products').configure_routes({Action.FIND_MANY: {'path': '/', 'auth': False}})
    routes = _routes(generator)
    assert routes[Action.FIND_MANY] == RouteActionConfig(path='/', middlewares=[], auth=AuthRequirement.NONE)
    for action in Action:
        if action is not Action.FIND_MANY:
            assert routes[action] == DEFAULT_ROUTES_CONFIG[action]


def test_empty_path_defaulted(generator):
    generator.configure_entity('products').configure_routes({Action.FIND_BY_ID: {'path': '', 'middlewares': [_mw]}})
    route = _routes(generator)[Action.FIND_BY_ID]
    assert route.path == DEFAULT_ROUTES_CONFIG[Action.FIND_BY_ID].path
    assert route.middlewares == [_mw]


def test_explicit_empty_middlewares_preserved_and_false_auth_defaulted():
    padded = pad_routes_config({Action.CREATE_ONE: {'middlewares': [], 'auth': False}})
    assert padded[Action.CREATE_ONE]['middlewares'] == []
    assert padded[Action.CREATE_ONE]['auth'] is AuthRequirement.ADMIN_ONLY


def test_false_auth_falls_back_to_default_requirement(generator):
    generator.configure_entity('products').configure_routes({Action.CREATE_ONE: {'path': '/', 'auth': False}})
    assert _routes(generator)[Action.CREATE_ONE].auth is AuthRequirement.ADMIN_ONLY


def test_public_route_declared_with_none_requirement(generator):
    generator.configure_entity('products').configure_routes({Action.CREATE_ONE: {'auth': AuthRequirement.NONE}})
    assert _routes(generator)[Action.CREATE_ONE].auth is AuthRequirement.NONE


def test_omitted_routes_pass_through(generator):
    generator.configure_entity('products').configure_routes({Action.DELETE_ONE: OMITTED})
    routes = _routes(generator)
    assert routes[Action.DELETE_ONE] is False
    assert routes[Action.FIND_MANY] == DEFAULT_ROUTES_CONFIG[Action.FIND_MANY]


def test_string_keys_and_auth_values(generator):
    generator.configure_entity('products').configure_routes({'update_one': {'auth': 'protected'}})
    assert _routes(generator)[Action.UPDATE_ONE].auth is AuthRequirement.PROTECTED


def test_non_string_path_rejected(generator):
    generator.configure_entity('products')
    with pytest.raises(ValidationError) as exc:
        generator.configure_routes({Action.FIND_MANY: {'path': 123, 'middlewares': [], 'auth': False}})
    assert '[products]' in str(exc.value) and '[find_many]' in str(exc.value) and '[path]' in str(exc.value)
    assert _routes(generator) is None


def test_unknown_keys_reported_together(generator):
    generator.configure_entity('products')
    with pytest.raises(ValidationError) as exc:
        generator.configure_routes({'archive': {'path': '/archive'}, 'export': {}, Action.FIND_MANY: {}})
    assert 'archive' in str(exc.value) and 'export' in str(exc.value)


def test_unknown_key_allowed_when_omitted(generator):
    generator.configure_entity('products').configure_routes({'archive': OMITTED})
    assert _routes(generator)['archive'] is False


@pytest.mark.parametrize('middlewares', ['not-a-list', [1, 2], {'a': _mw}])
def test_invalid_middlewares_rejected(generator, middlewares):
    generator.configure_entity('products')
    with pytest.raises(ValidationError) as exc:
        generator.configure_routes({Action.FIND_MANY: {'middlewares': middlewares}})
    assert '[middlewares]' in str(exc.value)


@pytest.mark.parametrize('auth', ['superuser', True, 3])
def test_invalid_auth_rejected(generator, auth):
    generator.configure_entity('products')
    with pytest.raises(ValidationError) as exc:
        generator.configure_routes({Action.SAVE: {'auth': auth}})
    assert '[auth]' in str(exc.value)


def test_non_mapping_entry_rejected(generator):
    generator.configure_entity('products')
    with pytest.raises(ValidationError):
        generator.configure_routes({Action.SAVE: True})


def test_route_action_config_instances_accepted(generator):
    custom = RouteActionConfig(path='/all', middlewares=[_mw], auth=AuthRequirement.PROTECTED)
    generator.configure_entity('products').configure_routes({Action.FIND_MANY: custom})
    assert _routes(generator)[Action.FIND_MANY] == custom


def test_default_routes_config_returns_fresh_copy():
    first = default_routes_config()
    first[Action.SAVE].middlewares.append(_mw)
    assert default_routes_config()[Action.SAVE].middlewares == []
