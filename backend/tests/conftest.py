import os, sys, pytest
# Ensure backend directory is on path so 'crudgen' imports without installation
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from flask import Flask
from crudgen import EndpointsGenerator
from tests.helpers import VALID_DB_ADAPTATION


@pytest.fixture()
def generator():
    return EndpointsGenerator()


@pytest.fixture()
def flask_app():
    app = Flask(__name__)
    app.config['TESTING'] = True
    return app


@pytest.fixture()
def custom_db_generator(generator):
    generator.use_custom_database()
    generator.adapt_interface(VALID_DB_ADAPTATION)
    return generator
