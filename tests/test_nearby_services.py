"""Test suite for nearby and browse service search."""

from skillpact.models import LocationType

from conftest import _create_location, _create_service, _create_user

RIGA = (56.9496, 24.1052)


def _titles(resp):
    return [s['title'] for s in resp.get_json()['services']]


class TestNearbyServices:
    """GET /api/services/nearby"""

    def test_requires_location(self, client, requester_headers, provider_service):
        resp = client.get('/api/services/nearby', headers=requester_headers)

        assert resp.status_code == 412
        data = resp.get_json()
        assert data['code'] == 'PRECONDITION_FAILED'
        assert 'set your location and service radius' in data['error']

    def test_requires_radius(self, client, requester, requester_headers, provider_service):
        _create_location(user_id=requester['id'], radius=None)

        resp = client.get('/api/services/nearby', headers=requester_headers)
        assert resp.status_code == 412

    def test_radius_boundary_and_order(self, client, provider, requester, requester_headers):
        lat, lng = RIGA
        _create_location(user_id=requester['id'], latitude=lat, longitude=lng, radius=10)

        # Offered from the provider's home, co-located with the caller
        _create_location(user_id=provider['id'], latitude=lat, longitude=lng)
        _create_service(provider['id'], title='Home bakery')

        near = _create_service(provider['id'], title='Bike repair')
        _create_location(service_id=near['id'], latitude=lat + 0.08, longitude=lng)

        beyond = _create_service(provider['id'], title='Boat tours')
        _create_location(service_id=beyond['id'], latitude=lat + 0.0905, longitude=lng)

        resp = client.get('/api/services/nearby', headers=requester_headers)

        assert resp.status_code == 200
        data = resp.get_json()
        assert _titles(resp) == ['Home bakery', 'Bike repair']
        assert data['services'][0]['distance'] == 0
        assert 8.8 < data['services'][1]['distance'] < 9.0
        assert data['services'][0]['user']['id'] == provider['id']

    def test_finds_service_across_antimeridian(self, client, provider, requester, requester_headers):
        _create_location(user_id=requester['id'], latitude=-17.0, longitude=179.95, radius=20)
        service = _create_service(provider['id'], title='Reef snorkelling')
        _create_location(service_id=service['id'], latitude=-17.0, longitude=-179.95)

        resp = client.get('/api/services/nearby', headers=requester_headers)

        assert resp.status_code == 200
        assert _titles(resp) == ['Reef snorkelling']
        assert 10 < resp.get_json()['services'][0]['distance'] < 11

    def test_excludes_own_inactive_and_non_own_types(self, client, provider, requester, requester_headers):
        lat, lng = RIGA
        _create_location(user_id=requester['id'], latitude=lat, longitude=lng, radius=10)
        _create_location(user_id=provider['id'], latitude=lat, longitude=lng)

        _create_service(requester['id'], title='My own service')
        _create_service(provider['id'], title='Paused', is_active=False)
        _create_service(provider['id'], title='Online tutoring', location_type=LocationType.REMOTE)
        _create_service(provider['id'], title='House calls', location_type=LocationType.CLIENT)
        _create_service(provider['id'], title='Pottery class')

        resp = client.get('/api/services/nearby', headers=requester_headers)
        assert _titles(resp) == ['Pottery class']

    def test_service_without_any_point_skipped(self, client, provider, requester, requester_headers):
        _create_location(user_id=requester['id'], radius=10)
        _create_service(provider['id'], title='Nowhere')

        resp = client.get('/api/services/nearby', headers=requester_headers)
        assert resp.status_code == 200
        assert _titles(resp) == []

    def test_limit(self, client, requester, requester_headers):
        lat, lng = RIGA
        _create_location(user_id=requester['id'], latitude=lat, longitude=lng, radius=10)
        for i in range(4):
            owner = _create_user()
            _create_location(user_id=owner['id'], latitude=lat + i * 0.01, longitude=lng)
            _create_service(owner['id'], title=f'Service {i}')

        resp = client.get('/api/services/nearby?limit=2', headers=requester_headers)
        assert _titles(resp) == ['Service 0', 'Service 1']
        assert resp.get_json()['total'] == 4

        assert client.get('/api/services/nearby?limit=51', headers=requester_headers).status_code == 400

    def test_requires_token(self, client, db_session):
        assert client.get('/api/services/nearby').status_code == 401


class TestBrowseServices:
    """GET /api/services/browse"""

    def test_public_browse(self, client, provider, provider_service):
        _create_service(provider['id'], title='Paused', is_active=False)

        resp = client.get('/api/services/browse')

        assert resp.status_code == 200
        assert _titles(resp) == ['Guitar lessons']

    def test_signed_in_caller_excludes_own(self, client, provider, requester, requester_headers, provider_service):
        _create_service(requester['id'], title='My own service')

        resp = client.get('/api/services/browse', headers=requester_headers)
        assert _titles(resp) == ['Guitar lessons']

    def test_category_filter(self, client, provider, category, provider_service):
        _create_service(provider['id'], title='Piano lessons', category_id=category['id'])

        resp = client.get(f"/api/services/browse?category_id={category['id']}")
        assert _titles(resp) == ['Piano lessons']
        assert resp.get_json()['services'][0]['category']['name'] == 'Music & Arts'
