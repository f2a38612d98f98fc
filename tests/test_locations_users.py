"""Test suite for location and profile endpoints."""

import pytest

from skillpact import db
from skillpact.models import ExchangeStatus, Location, Skill

from conftest import _create_exchange, _create_location, _create_service, _create_user, auth_for


class TestLocations:
    """/api/locations"""

    def test_no_location_yet(self, client, provider_headers):
        resp = client.get('/api/locations/me', headers=provider_headers)
        assert resp.status_code == 200
        assert resp.get_json()['location'] is None

    def test_set_and_replace(self, client, provider, provider_headers):
        resp = client.put('/api/locations/me', json={
            'latitude': 56.9496,
            'longitude': 24.1052,
            'radius': 15,
            'city': 'Riga'
        }, headers=provider_headers)

        assert resp.status_code == 200
        assert resp.get_json()['location']['radius'] == 15
        assert 'services.nearby' in resp.get_json()['invalidates']

        resp = client.put('/api/locations/me', json={'latitude': 54.6872, 'longitude': 25.2797},
                          headers=provider_headers)

        location = resp.get_json()['location']
        assert location['latitude'] == 54.6872
        assert location['radius'] == 15
        assert location['city'] == 'Riga'
        assert Location.query.filter_by(user_id=provider['id']).count() == 1

    @pytest.mark.parametrize('payload', [
        {'latitude': 91, 'longitude': 0},
        {'latitude': 0, 'longitude': -181},
        {'latitude': 0, 'longitude': 0, 'radius': 0.5},
        {'latitude': 0, 'longitude': 0, 'radius': 101},
        {'longitude': 0},
    ])
    def test_invalid_location(self, client, provider_headers, payload):
        resp = client.put('/api/locations/me', json=payload, headers=provider_headers)
        assert resp.status_code == 400
        assert Location.query.count() == 0

    def test_update_radius(self, client, provider, provider_headers):
        _create_location(user_id=provider['id'], radius=5)

        resp = client.put('/api/locations/radius', json={'radius': 25}, headers=provider_headers)
        assert resp.status_code == 200
        assert resp.get_json()['location']['radius'] == 25

    def test_update_radius_without_location(self, client, provider_headers):
        resp = client.put('/api/locations/radius', json={'radius': 25}, headers=provider_headers)
        assert resp.status_code == 400


class TestProfile:
    """/api/users/me"""

    def test_get_profile_is_private_view(self, client, provider, provider_headers):
        resp = client.get('/api/users/me', headers=provider_headers)

        assert resp.status_code == 200
        user = resp.get_json()['user']
        assert user['email'] == provider['email']
        assert user['location'] is None
        assert user['skills'] == []

    def test_update_profile(self, client, provider, provider_headers):
        resp = client.patch('/api/users/me', json={
            'name': 'Ilze Berzina',
            'location_string': 'Tallinas iela 10, Riga',
            'radius': 12,
            'skills': ['Baking', 'Knitting', 'Baking']
        }, headers=provider_headers)

        assert resp.status_code == 200
        user = resp.get_json()['user']
        assert user['name'] == 'Ilze Berzina'
        assert user['location']['address'] == 'Tallinas iela 10, Riga'
        assert user['location']['radius'] == 12
        assert [s['name'] for s in user['skills']] == ['Baking', 'Knitting']
        assert 'users.profile_completion' in resp.get_json()['invalidates']

    def test_skills_are_added_not_replaced(self, client, provider, provider_headers):
        client.patch('/api/users/me', json={'skills': ['Baking']}, headers=provider_headers)
        client.patch('/api/users/me', json={'skills': ['Gardening', 'Baking']}, headers=provider_headers)

        assert sorted(s.name for s in Skill.query.filter_by(user_id=provider['id'])) == ['Baking', 'Gardening']

    def test_empty_update_rejected(self, client, provider_headers):
        resp = client.patch('/api/users/me', json={}, headers=provider_headers)
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'No fields provided for update'

    @pytest.mark.parametrize('payload', [
        {'name': ''},
        {'skills': 'Baking'},
        {'skills': ['']},
        {'radius': -1},
    ])
    def test_invalid_update(self, client, provider_headers, payload):
        resp = client.patch('/api/users/me', json=payload, headers=provider_headers)
        assert resp.status_code == 400


class TestProfileCompletion:
    """GET /api/users/me/completion"""

    def test_empty_profile(self, client, db_session):
        user = _create_user(name=None, image=None)

        resp = client.get('/api/users/me/completion', headers=auth_for(user['id']))

        data = resp.get_json()
        assert data['percentage'] == 0
        assert data['has_location'] is False
        assert data['has_service_radius'] is False

    def test_partial_profile(self, client, provider, provider_headers):
        _create_location(user_id=provider['id'], radius=None)

        data = client.get('/api/users/me/completion', headers=provider_headers).get_json()

        # name, image and location out of six
        assert data['percentage'] == 50
        assert data['has_service_radius'] is False

    def test_complete_profile(self, client, provider, provider_headers, provider_service):
        _create_location(user_id=provider['id'], radius=10)
        db.session.add(Skill(user_id=provider['id'], name='Guitar'))
        db.session.commit()

        data = client.get('/api/users/me/completion', headers=provider_headers).get_json()
        assert data['percentage'] == 100


class TestDashboardStats:
    """GET /api/users/me/stats"""

    def test_counts(self, client, provider, requester, provider_headers, provider_service):
        _create_exchange(provider['id'], requester['id'], provider_service['id'], ExchangeStatus.COMPLETED, hours=2)
        _create_exchange(provider['id'], requester['id'], provider_service['id'], ExchangeStatus.COMPLETED,
                         hours=1.5)
        _create_exchange(provider['id'], requester['id'], provider_service['id'], ExchangeStatus.CANCELLED, hours=3)
        theirs = _create_service(requester['id'])
        _create_exchange(requester['id'], provider['id'], theirs['id'], ExchangeStatus.COMPLETED, hours=4)

        resp = client.get('/api/users/me/stats', headers=provider_headers)

        assert resp.get_json() == {
            'unread_notifications_count': 0,
            'services_offered_count': 2,
            'services_received_count': 1,
            'hours_banked': 3.5
        }


class TestPublicProfile:
    """GET /api/users/<id>"""

    def test_public_view_hides_private_fields(self, client, provider, provider_service):
        _create_location(user_id=provider['id'])
        _create_service(provider['id'], title='Paused', is_active=False)

        resp = client.get(f"/api/users/{provider['id']}")

        assert resp.status_code == 200
        user = resp.get_json()['user']
        assert 'email' not in user
        assert set(user['location']) == {'city', 'state'}
        assert [s['title'] for s in user['services']] == ['Guitar lessons']

    def test_unknown_user(self, client, db_session):
        assert client.get('/api/users/99999').status_code == 404
