"""Test suite for notification endpoints."""

from datetime import datetime, timedelta

from skillpact import db
from skillpact.models import Notification, NotificationType
from skillpact.routes.notifications import create_notification, deliver_notification

from conftest import make_token


def _add(recipient_id, created_at=None, is_read=False, **overrides):
    notification = create_notification(
        recipient_id=recipient_id,
        notification_type=overrides.pop('notification_type', NotificationType.EXCHANGE_REQUEST),
        title=overrides.pop('title', 'New Exchange Request'),
        message=overrides.pop('message', 'Someone has requested your "Guitar lessons" service'),
        **overrides
    )
    notification.is_read = is_read
    if created_at:
        notification.created_at = created_at
    db.session.commit()
    return notification.id


class TestGetNotifications:
    """GET /api/notifications"""

    def test_newest_first_with_unread_count(self, client, provider, provider_headers):
        now = datetime.utcnow()
        old = _add(provider['id'], created_at=now - timedelta(days=2), is_read=True)
        new = _add(provider['id'], created_at=now)

        resp = client.get('/api/notifications', headers=provider_headers)

        assert resp.status_code == 200
        data = resp.get_json()
        assert [n['id'] for n in data['notifications']] == [new, old]
        assert data['unread_count'] == 1

    def test_unread_only(self, client, provider, provider_headers):
        _add(provider['id'], is_read=True)
        unread = _add(provider['id'])

        resp = client.get('/api/notifications?unread_only=true', headers=provider_headers)
        assert [n['id'] for n in resp.get_json()['notifications']] == [unread]

    def test_limited_to_twenty(self, client, provider, provider_headers):
        for _ in range(25):
            _add(provider['id'])

        resp = client.get('/api/notifications', headers=provider_headers)
        assert len(resp.get_json()['notifications']) == 20
        assert resp.get_json()['unread_count'] == 25

    def test_only_own(self, client, provider, requester_headers):
        _add(provider['id'])
        resp = client.get('/api/notifications', headers=requester_headers)
        assert resp.get_json()['notifications'] == []

    def test_unread_count_endpoint(self, client, provider, provider_headers):
        _add(provider['id'])
        _add(provider['id'])
        resp = client.get('/api/notifications/unread-count', headers=provider_headers)
        assert resp.get_json() == {'unread_count': 2}


class TestMarkAsRead:
    """POST /api/notifications/read and /<id>/read"""

    def test_mark_all(self, client, provider, requester, provider_headers):
        _add(provider['id'])
        _add(provider['id'])
        others = _add(requester['id'])

        resp = client.post('/api/notifications/read', json={}, headers=provider_headers)

        assert resp.status_code == 200
        assert resp.get_json()['updated_count'] == 2
        assert 'notifications.unread_count' in resp.get_json()['invalidates']
        assert db.session.get(Notification, others).is_read is False

    def test_mark_selected(self, client, provider, provider_headers):
        first = _add(provider['id'])
        second = _add(provider['id'])

        resp = client.post('/api/notifications/read', json={'ids': [first]}, headers=provider_headers)

        assert resp.get_json()['updated_count'] == 1
        db.session.expire_all()
        assert db.session.get(Notification, first).is_read is True
        assert db.session.get(Notification, first).read_at is not None
        assert db.session.get(Notification, second).is_read is False

    def test_cannot_mark_someone_elses(self, client, requester, provider_headers):
        theirs = _add(requester['id'])

        resp = client.post('/api/notifications/read', json={'ids': [theirs]}, headers=provider_headers)
        assert resp.get_json()['updated_count'] == 0

        resp = client.post(f'/api/notifications/{theirs}/read', headers=provider_headers)
        assert resp.status_code == 403

    def test_empty_ids(self, client, provider, provider_headers):
        _add(provider['id'])
        resp = client.post('/api/notifications/read', json={'ids': []}, headers=provider_headers)
        assert resp.get_json()['updated_count'] == 0

    def test_invalid_ids(self, client, provider_headers):
        resp = client.post('/api/notifications/read', json={'ids': 'all'}, headers=provider_headers)
        assert resp.status_code == 400

    def test_mark_single(self, client, provider, provider_headers):
        notification_id = _add(provider['id'])

        resp = client.post(f'/api/notifications/{notification_id}/read', headers=provider_headers)

        assert resp.status_code == 200
        assert resp.get_json()['notification']['is_read'] is True

    def test_mark_single_missing(self, client, provider_headers):
        assert client.post('/api/notifications/99999/read', headers=provider_headers).status_code == 404


class TestDeliverNotification:
    """Best-effort emission helper."""

    def test_delivers_and_pushes(self, db_session, provider, requester, monkeypatch):
        pushed = []
        monkeypatch.setattr('skillpact.routes.notifications.push_notification', pushed.append)

        notification = deliver_notification(
            recipient_id=provider['id'],
            sender_id=requester['id'],
            notification_type=NotificationType.MESSAGE,
            title='New message',
            message='Hello'
        )

        assert notification.id is not None
        assert pushed == [notification]

    def test_push_failure_is_swallowed(self, db_session, provider, monkeypatch):
        def broken(notification):
            raise ConnectionError('redis down')

        monkeypatch.setattr('skillpact.routes.notifications.push_notification', broken)

        notification = deliver_notification(
            recipient_id=provider['id'],
            notification_type=NotificationType.MESSAGE,
            title='New message',
            message='Hello'
        )
        assert notification is not None
        assert Notification.query.count() == 1


class TestAuthentication:
    """Bearer token handling on protected routes."""

    def test_token_from_sub_claim(self, client, provider):
        # Registered claim values must be strings
        token = make_token(str(provider['id']), claim='sub')
        resp = client.get('/api/notifications/unread-count', headers={'Authorization': f'Bearer {token}'})
        assert resp.status_code == 200

    def test_expired_token(self, client, provider):
        token = make_token(provider['id'], expires_in=timedelta(seconds=-10))
        resp = client.get('/api/notifications', headers={'Authorization': f'Bearer {token}'})
        assert resp.status_code == 401
        assert resp.get_json()['error'] == 'Token has expired'

    def test_bad_token(self, client, db_session):
        resp = client.get('/api/notifications', headers={'Authorization': 'Bearer not-a-token'})
        assert resp.status_code == 401
        assert resp.get_json()['error'] == 'Token is invalid'

    def test_missing_token(self, client, db_session):
        resp = client.get('/api/notifications')
        assert resp.status_code == 401
        assert resp.get_json()['error'] == 'Token is missing'
