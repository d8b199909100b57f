"""
FoodBridge - test configuration and fixtures
"""
import os
from collections import namedtuple

import pytest

# Set testing environment before the app reads its config
os.environ['TESTING'] = 'true'
os.environ['SQLALCHEMY_DATABASE_URI'] = 'sqlite://'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['BCRYPT_LOG_ROUNDS'] = '4'
os.environ['FOODBRIDGE_CONFIG'] = os.path.join(os.path.dirname(__file__),
                                               'missing_config.json')
os.environ.pop('SENDGRID_API_KEY', None)

from foodbridge import app as flask_app  # noqa: E402
from foodbridge import db  # noqa: E402

PASSWORD = 'password123'

Account = namedtuple('Account', ['user', 'token', 'headers'])


@pytest.fixture
def app():
    """Fresh tables for each test"""
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
    yield flask_app
    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register an account through the API and return its token headers"""
    def _register(email, user_type='individual', name='Test User', **fields):
        body = {'name': name, 'email': email, 'password': PASSWORD,
                'user_type': user_type}
        body.update(fields)
        response = client.post('/auth/register', json=body)
        assert response.status_code == 201, response.get_json()
        data = response.get_json()
        return Account(data['user'], data['token'],
                       {'Authorization': f"Bearer {data['token']}"})

    return _register


@pytest.fixture
def restaurant(register):
    return register('chef@example.com', 'donor_company', name='Abebe Kebede',
                    company_name='Bole Pizza', company_type='restaurant',
                    address='Bole Road, Addis Ababa')


@pytest.fixture
def grocery(register):
    return register('shop@example.com', 'donor_company', name='Sara Tesfaye',
                    company_name='Piassa Market', company_type='grocery_store',
                    address='Piassa, Addis Ababa')


@pytest.fixture
def charity(register):
    return register('care@example.com', 'recipient_company',
                    name='Hanna Girma', company_name='Hope Children Center',
                    address='Kazanchis, Addis Ababa')


@pytest.fixture
def individual(register):
    return register('dawit@example.com', name='Dawit Alemu')


@pytest.fixture
def organizer(register):
    return register('lead@example.com', 'organizer', name='Meron Haile')
