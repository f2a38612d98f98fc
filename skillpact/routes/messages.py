"""Chat routes: messages exchanged between the two parties of an exchange."""

import logging

from flask import Blueprint, request, jsonify, current_app

from skillpact import db, socketio
from skillpact.errors import BadRequest
from skillpact.models import Message, ACTIVE_STATUSES
from skillpact.models.message import MAX_MESSAGE_LENGTH
from skillpact.routes.exchanges.helpers import get_exchange_or_404, get_user_or_404, require_party
from skillpact.routes.invalidation import invalidates
from skillpact.routes.notifications import notify_new_message
from skillpact.socket_events import emit_new_message
from skillpact.utils import token_required, run_safe
from skillpact.utils.payloads import get_json_body, get_string

logger = logging.getLogger(__name__)

messages_bp = Blueprint('messages', __name__)

# Statuses in which new messages can still be sent
OPEN_CHAT_STATUSES = ACTIVE_STATUSES


@messages_bp.route('/exchange/<int:exchange_id>', methods=['GET'])
@token_required
def get_messages(current_user_id, exchange_id):
    """Messages of an exchange, oldest first.

    Query params:
        - limit: most recent N messages (default 50, max 100)
    """
    exchange = get_exchange_or_404(exchange_id)
    require_party(exchange, current_user_id, 'You are not a participant in this exchange')

    max_limit = current_app.config['MESSAGES_MAX_LIMIT']
    limit = request.args.get('limit', current_app.config['MESSAGES_DEFAULT_LIMIT'], type=int)
    limit = max(1, min(limit, max_limit))

    # Take the newest `limit`, then return them in chronological order
    recent = Message.query.filter_by(exchange_id=exchange.id).order_by(
        Message.created_at.desc(),
        Message.id.desc()
    ).limit(limit).all()
    messages = list(reversed(recent))

    return jsonify({
        'messages': [m.to_dict() for m in messages],
        'exchange_id': exchange.id,
        'can_send': exchange.status in OPEN_CHAT_STATUSES
    }), 200


@messages_bp.route('/exchange/<int:exchange_id>', methods=['POST'])
@token_required
def send_message(current_user_id, exchange_id):
    """Send a message to the other party.

    The message is stored first; the live broadcast and the notification
    that follow are best effort.
    """
    exchange = get_exchange_or_404(exchange_id)
    require_party(exchange, current_user_id, 'You are not a participant in this exchange')

    data = get_json_body()
    content = get_string(data, 'content', required=True, max_length=MAX_MESSAGE_LENGTH)

    if exchange.status not in OPEN_CHAT_STATUSES:
        raise BadRequest(f'Cannot send messages on a {exchange.status.lower()} exchange')

    sender = get_user_or_404(current_user_id)

    message = Message(
        exchange_id=exchange.id,
        sender_id=current_user_id,
        content=content
    )
    db.session.add(message)
    db.session.commit()

    message_dict = message.to_dict()

    run_safe(emit_new_message, socketio, exchange.id, message_dict)
    notify_new_message(exchange, current_user_id, sender, content)

    return jsonify({
        'message': message_dict,
        'invalidates': invalidates('send_message')
    }), 201
