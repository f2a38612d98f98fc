"""WebSocket events for real-time exchange chat and notifications.

Rooms:
    - user_<id>: every connection of a user, receives ``notification`` events
    - exchange_<id>: clients viewing an exchange chat, receive ``new_message``
"""

import logging

import jwt
from flask import request
from flask_socketio import emit, join_room, leave_room

from skillpact import db
from skillpact.models import Exchange
from skillpact.utils.auth import decode_user_id

logger = logging.getLogger(__name__)

# Socket id -> user id for connections handled by this worker
connected_users = {}


def user_room(user_id):
    return f'user_{user_id}'


def exchange_room(exchange_id):
    return f'exchange_{exchange_id}'


def get_user_from_token(token):
    """Extract user ID from a (optionally "Bearer "-prefixed) JWT, or None."""
    if not token:
        return None
    if token.startswith('Bearer '):
        token = token.split(' ', 1)[1]
    try:
        return decode_user_id(token)
    except (jwt.InvalidTokenError, ValueError, TypeError) as e:
        logger.warning('Socket token rejected: %s', e)
        return None


def register_socket_events(socketio):
    """Register all Socket.IO event handlers."""

    @socketio.on('connect')
    def handle_connect(auth=None):
        """Authenticate the connection and join the user's own room."""
        token = None
        if auth and isinstance(auth, dict):
            token = auth.get('token')
        elif request.args.get('token'):
            token = request.args.get('token')

        user_id = get_user_from_token(token)
        if not user_id:
            logger.warning('Socket connection without a valid token')
            return False

        connected_users[request.sid] = user_id
        join_room(user_room(user_id))

        logger.info('User %s connected: %s', user_id, request.sid)
        emit('connected', {'user_id': user_id})
        return True

    @socketio.on('disconnect')
    def handle_disconnect(*args):
        user_id = connected_users.pop(request.sid, None)
        if user_id:
            logger.info('User %s disconnected: %s', user_id, request.sid)

    @socketio.on('join_exchange')
    def handle_join_exchange(data):
        """Join an exchange chat room. Only the two parties may join."""
        user_id = connected_users.get(request.sid)
        exchange_id = data.get('exchange_id') if isinstance(data, dict) else None

        if not user_id or not exchange_id:
            emit('error', {'message': 'Missing exchange_id'})
            return

        exchange = db.session.get(Exchange, exchange_id)
        if not exchange:
            emit('error', {'message': 'Exchange not found'})
            return

        if not exchange.is_party(user_id):
            emit('error', {'message': 'Access denied'})
            return

        join_room(exchange_room(exchange_id))

        logger.info('User %s joined exchange %s', user_id, exchange_id)
        emit('joined_exchange', {'exchange_id': exchange_id})

    @socketio.on('leave_exchange')
    def handle_leave_exchange(data):
        exchange_id = data.get('exchange_id') if isinstance(data, dict) else None
        if not exchange_id:
            return

        leave_room(exchange_room(exchange_id))
        emit('left_exchange', {'exchange_id': exchange_id})


def emit_new_message(socketio, exchange_id, message_dict):
    """Broadcast a stored message to everyone in the exchange room."""
    socketio.emit('new_message', {
        'message': message_dict,
        'exchange_id': exchange_id
    }, to=exchange_room(exchange_id))

    logger.info('Emitted new message to exchange %s', exchange_id)
