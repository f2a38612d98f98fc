"""Notification routes and the helpers that emit notifications.

Emission is best-effort: it runs after the exchange transition has been
committed, in its own commit. A failure is logged and rolled back but never
reverts the transition that caused it.
"""

import logging
from datetime import datetime

from flask import Blueprint, request, jsonify, current_app

from skillpact import db, socketio
from skillpact.errors import BadRequest, Forbidden, NotFound
from skillpact.models import Notification, NotificationType
from skillpact.routes.invalidation import invalidates
from skillpact.utils import token_required, get_display_name, run_safe
from skillpact.utils.dates import format_schedule_date
from skillpact.utils.payloads import get_json_body

logger = logging.getLogger(__name__)

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('', methods=['GET'])
@token_required
def get_notifications(current_user_id):
    """Get the most recent notifications for the current user.

    Query params:
        - unread_only: If 'true', only return unread notifications
    """
    unread_only = request.args.get('unread_only', 'false').lower() == 'true'

    query = Notification.query.filter_by(recipient_id=current_user_id)
    if unread_only:
        query = query.filter_by(is_read=False)

    notifications = query.order_by(
        Notification.created_at.desc(),
        Notification.id.desc()
    ).limit(current_app.config['NOTIFICATIONS_LIMIT']).all()

    return jsonify({
        'notifications': [n.to_dict() for n in notifications],
        'unread_count': _unread_count(current_user_id)
    }), 200


@notifications_bp.route('/unread-count', methods=['GET'])
@token_required
def get_unread_count(current_user_id):
    """Get count of unread notifications."""
    return jsonify({'unread_count': _unread_count(current_user_id)}), 200


@notifications_bp.route('/read', methods=['POST'])
@token_required
def mark_notifications_as_read(current_user_id):
    """Mark notifications as read.

    Body params:
        - ids: optional list of notification ids. Omitted means every unread
          notification of the caller.
    """
    data = get_json_body()
    ids = data.get('ids')

    query = Notification.query.filter_by(recipient_id=current_user_id, is_read=False)

    if ids is not None:
        if not isinstance(ids, list) or not all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
            raise BadRequest('ids must be a list of notification ids')
        if not ids:
            return jsonify({'success': True, 'updated_count': 0}), 200
        query = query.filter(Notification.id.in_(ids))

    updated_count = query.update({
        'is_read': True,
        'read_at': datetime.utcnow()
    }, synchronize_session=False)
    db.session.commit()

    return jsonify({
        'success': True,
        'updated_count': updated_count,
        'invalidates': invalidates('mark_notifications_read')
    }), 200


@notifications_bp.route('/<int:notification_id>/read', methods=['POST'])
@token_required
def mark_as_read(current_user_id, notification_id):
    """Mark a single notification as read."""
    notification = db.session.get(Notification, notification_id)

    if not notification:
        raise NotFound('Notification not found')

    if notification.recipient_id != current_user_id:
        raise Forbidden('You cannot modify this notification')

    notification.mark_as_read()
    db.session.commit()

    return jsonify({
        'success': True,
        'notification': notification.to_dict()
    }), 200


def _unread_count(user_id):
    return Notification.query.filter_by(recipient_id=user_id, is_read=False).count()


# ============ HELPER FUNCTIONS FOR CREATING NOTIFICATIONS ============

def create_notification(recipient_id: int, notification_type: str, title: str, message: str,
                        sender_id: int = None, exchange_id: int = None) -> Notification:
    """Add a notification to the session (caller commits)."""
    notification = Notification(
        recipient_id=recipient_id,
        sender_id=sender_id,
        type=notification_type,
        title=title,
        message=message,
        exchange_id=exchange_id
    )
    db.session.add(notification)
    return notification


def push_notification(notification: Notification):
    """Push a committed notification to the recipient's socket room."""
    socketio.emit('notification', notification.to_dict(), to=f'user_{notification.recipient_id}')


def deliver_notification(**kwargs):
    """Create, commit and push a notification without ever raising.

    Returns the notification, or None when it could not be stored.
    """
    try:
        notification = create_notification(**kwargs)
        db.session.commit()
    except Exception as notify_error:
        db.session.rollback()
        logger.warning(
            'Notification %s for user %s skipped (non-critical): %s',
            kwargs.get('notification_type'), kwargs.get('recipient_id'), notify_error
        )
        return None

    run_safe(push_notification, notification)
    return notification


def _service_title(exchange):
    if exchange.provider_service and exchange.provider_service.title:
        return exchange.provider_service.title
    return 'Service'


def notify_exchange_requested(exchange, requester, note=None):
    """Tell the provider someone requested their service."""
    message = f'{get_display_name(requester)} has requested your "{_service_title(exchange)}" service'
    if note:
        message = f'{message}: "{note}"'
    return deliver_notification(
        recipient_id=exchange.provider_id,
        sender_id=exchange.requester_id,
        notification_type=NotificationType.EXCHANGE_REQUEST,
        title='New Exchange Request',
        message=message,
        exchange_id=exchange.id
    )


def notify_exchange_response(exchange, accepted):
    """Tell the requester whether the provider accepted."""
    verdict = 'accepted' if accepted else 'declined'
    return deliver_notification(
        recipient_id=exchange.requester_id,
        sender_id=exchange.provider_id,
        notification_type=NotificationType.EXCHANGE_ACCEPTED if accepted else NotificationType.EXCHANGE_DECLINED,
        title='Request Accepted' if accepted else 'Request Declined',
        message=f'Your request for "{_service_title(exchange)}" has been {verdict}',
        exchange_id=exchange.id
    )


def notify_exchange_scheduled(exchange, actor_id):
    return deliver_notification(
        recipient_id=exchange.other_party_id(actor_id),
        sender_id=actor_id,
        notification_type=NotificationType.EXCHANGE_SCHEDULED,
        title='Exchange Scheduled',
        message=(
            f'Your exchange for "{_service_title(exchange)}" has been scheduled for '
            f'{format_schedule_date(exchange.scheduled_date)}.'
        ),
        exchange_id=exchange.id
    )


def notify_exchange_completed(exchange, actor_id):
    return deliver_notification(
        recipient_id=exchange.other_party_id(actor_id),
        sender_id=actor_id,
        notification_type=NotificationType.EXCHANGE_COMPLETED,
        title='Exchange Completed',
        message=f'Your exchange for "{_service_title(exchange)}" has been marked as completed. You can now rate it.',
        exchange_id=exchange.id
    )


def notify_exchange_cancelled(exchange, actor_id):
    return deliver_notification(
        recipient_id=exchange.other_party_id(actor_id),
        sender_id=actor_id,
        notification_type=NotificationType.EXCHANGE_CANCELLED,
        title='Exchange Cancelled',
        message=f'The exchange for "{_service_title(exchange)}" has been cancelled.',
        exchange_id=exchange.id
    )


def notify_new_rating(exchange, rater_id, rater, rated_user_id, rating):
    return deliver_notification(
        recipient_id=rated_user_id,
        sender_id=rater_id,
        notification_type=NotificationType.NEW_RATING,
        title='New Rating',
        message=f'{get_display_name(rater)} rated you {rating}/5 for "{_service_title(exchange)}"',
        exchange_id=exchange.id
    )


def notify_new_message(exchange, sender_id, sender, preview):
    if len(preview) > 80:
        preview = preview[:77] + '...'
    return deliver_notification(
        recipient_id=exchange.other_party_id(sender_id),
        sender_id=sender_id,
        notification_type=NotificationType.MESSAGE,
        title=f'New message from {get_display_name(sender)}',
        message=preview,
        exchange_id=exchange.id
    )
