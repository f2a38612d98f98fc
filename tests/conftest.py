"""
Pytest configuration and fixtures for testing the Skillpact API.
"""

import os
from datetime import datetime, timedelta

import jwt
import pytest
from faker import Faker

from skillpact import create_app, db
from skillpact.models import (
    Exchange,
    ExchangeStatus,
    Location,
    LocationType,
    Service,
    ServiceCategory,
    User,
)

fake = Faker()

TEST_SECRET = 'test-secret-key-for-testing'


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    os.environ['FLASK_ENV'] = 'testing'

    app = create_app('testing')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


def make_token(user_id, expires_in=timedelta(hours=1), claim='user_id'):
    """Sign a bearer token the way the auth provider does."""
    payload = {claim: user_id, 'exp': datetime.utcnow() + expires_in}
    return jwt.encode(payload, TEST_SECRET, algorithm='HS256')


def auth_for(user_id):
    return {'Authorization': f'Bearer {make_token(user_id)}'}


def _create_user(**overrides):
    """Helper to create a user with sensible defaults."""
    data = {
        'name': fake.name(),
        'email': fake.unique.email(),
        'image': fake.image_url(),
    }
    data.update(overrides)
    user = User(**data)
    db.session.add(user)
    db.session.commit()
    return {'id': user.id, 'name': user.name, 'email': user.email}


def _create_location(user_id=None, service_id=None, latitude=56.9496, longitude=24.1052, radius=10):
    location = Location(
        user_id=user_id,
        service_id=service_id,
        latitude=latitude,
        longitude=longitude,
        radius=radius,
        city=fake.city()
    )
    db.session.add(location)
    db.session.commit()
    return location.id


def _create_service(user_id, **overrides):
    data = {
        'title': fake.sentence(nb_words=3)[:100],
        'description': fake.paragraph()[:500],
        'hourly_rate': 2,
        'location_type': LocationType.OWN,
        'is_active': True,
    }
    data.update(overrides)
    service = Service(user_id=user_id, **data)
    db.session.add(service)
    db.session.commit()
    return {'id': service.id, 'title': service.title, 'user_id': user_id}


def _create_exchange(provider_id, requester_id, service_id, status=ExchangeStatus.REQUESTED, **overrides):
    exchange = Exchange(
        provider_id=provider_id,
        requester_id=requester_id,
        provider_service_id=service_id,
        status=status,
        **overrides
    )
    db.session.add(exchange)
    db.session.commit()
    return exchange.id


@pytest.fixture
def provider(app, db_session):
    """User offering the service."""
    return _create_user()


@pytest.fixture
def requester(app, db_session):
    """User requesting the service."""
    return _create_user()


@pytest.fixture
def outsider(app, db_session):
    """User with no part in any exchange."""
    return _create_user()


@pytest.fixture
def provider_headers(provider):
    return auth_for(provider['id'])


@pytest.fixture
def requester_headers(requester):
    return auth_for(requester['id'])


@pytest.fixture
def outsider_headers(outsider):
    return auth_for(outsider['id'])


@pytest.fixture
def provider_service(db_session, provider):
    return _create_service(provider['id'], title='Guitar lessons')


@pytest.fixture
def category(db_session):
    category = ServiceCategory(name='Music & Arts', description='Lessons and creative work')
    db.session.add(category)
    db.session.commit()
    return {'id': category.id, 'name': category.name}


@pytest.fixture
def requested_exchange(db_session, provider, requester, provider_service):
    return _create_exchange(provider['id'], requester['id'], provider_service['id'])


@pytest.fixture
def accepted_exchange(db_session, provider, requester, provider_service):
    return _create_exchange(provider['id'], requester['id'], provider_service['id'], ExchangeStatus.ACCEPTED)


@pytest.fixture
def completed_exchange(db_session, provider, requester, provider_service):
    return _create_exchange(
        provider['id'], requester['id'], provider_service['id'], ExchangeStatus.COMPLETED,
        completed_date=datetime.utcnow() - timedelta(hours=1),
        hours=2
    )


def future_iso(days=3):
    return (datetime.utcnow() + timedelta(days=days)).replace(microsecond=0).isoformat() + 'Z'


def past_iso(days=1):
    return (datetime.utcnow() - timedelta(days=days)).replace(microsecond=0).isoformat() + 'Z'
