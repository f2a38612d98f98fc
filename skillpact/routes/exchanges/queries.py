"""Read-only exchange views, always scoped to the caller."""

from datetime import datetime

from flask import request, jsonify, current_app
from sqlalchemy import or_, and_

from skillpact.errors import BadRequest
from skillpact.models import Exchange, ExchangeStatus, ACTIVE_STATUSES
from skillpact.routes.exchanges import exchanges_bp
from skillpact.routes.exchanges.helpers import exchange_query, get_exchange_or_404, require_party
from skillpact.utils import token_required

STATUS_FILTERS = ('all', 'pending', 'upcoming', 'completed', 'cancelled')


def _involves(user_id):
    return or_(Exchange.provider_id == user_id, Exchange.requester_id == user_id)


def _pending_filter(user_id, now):
    # Provider: requests waiting for their answer.
    # Requester: accepted requests with a date still ahead of them.
    return or_(
        and_(Exchange.provider_id == user_id, Exchange.status == ExchangeStatus.REQUESTED),
        and_(
            Exchange.requester_id == user_id,
            Exchange.status == ExchangeStatus.ACCEPTED,
            Exchange.scheduled_date > now
        )
    )


def _serialize(exchanges):
    return [e.to_dict() for e in exchanges]


@exchanges_bp.route('', methods=['GET'])
@token_required
def get_user_exchanges(current_user_id):
    """List the caller's exchanges.

    Query params:
        - status: all (default) | pending | upcoming | completed | cancelled
    """
    status = request.args.get('status', 'all').lower()
    if status not in STATUS_FILTERS:
        raise BadRequest(f"Invalid status filter '{status}'. Valid filters: {', '.join(STATUS_FILTERS)}")

    now = datetime.utcnow()
    query = exchange_query()

    if status == 'pending':
        query = query.filter(_pending_filter(current_user_id, now))
    elif status == 'upcoming':
        query = query.filter(
            _involves(current_user_id),
            Exchange.status.in_([ExchangeStatus.ACCEPTED, ExchangeStatus.SCHEDULED]),
            Exchange.scheduled_date > now
        )
    elif status == 'completed':
        query = query.filter(_involves(current_user_id), Exchange.status == ExchangeStatus.COMPLETED)
    elif status == 'cancelled':
        query = query.filter(
            _involves(current_user_id),
            Exchange.status.in_([ExchangeStatus.CANCELLED, ExchangeStatus.DECLINED])
        )
    else:
        query = query.filter(_involves(current_user_id))

    exchanges = query.order_by(
        Exchange.status.asc(),
        Exchange.scheduled_date.asc(),
        Exchange.updated_at.desc()
    ).all()

    return jsonify({'exchanges': _serialize(exchanges), 'total': len(exchanges)}), 200


@exchanges_bp.route('/pending', methods=['GET'])
@token_required
def get_pending_exchanges(current_user_id):
    exchanges = exchange_query().filter(
        _pending_filter(current_user_id, datetime.utcnow())
    ).order_by(Exchange.updated_at.desc()).all()

    return jsonify({'exchanges': _serialize(exchanges)}), 200


@exchanges_bp.route('/upcoming', methods=['GET'])
@token_required
def get_upcoming_exchanges(current_user_id):
    """Next accepted/scheduled exchanges, soonest first."""
    exchanges = exchange_query().filter(
        _involves(current_user_id),
        Exchange.status.in_([ExchangeStatus.ACCEPTED, ExchangeStatus.SCHEDULED]),
        Exchange.scheduled_date >= datetime.utcnow()
    ).order_by(
        Exchange.scheduled_date.asc()
    ).limit(current_app.config['UPCOMING_LIMIT']).all()

    return jsonify({'exchanges': _serialize(exchanges)}), 200


@exchanges_bp.route('/recent', methods=['GET'])
@token_required
def get_recent_activity(current_user_id):
    """Recently completed or cancelled exchanges."""
    exchanges = exchange_query().filter(
        _involves(current_user_id),
        Exchange.status.in_([ExchangeStatus.COMPLETED, ExchangeStatus.CANCELLED])
    ).order_by(
        Exchange.updated_at.desc(),
        Exchange.id.desc()
    ).limit(current_app.config['RECENT_ACTIVITY_LIMIT']).all()

    return jsonify({'exchanges': _serialize(exchanges)}), 200


@exchanges_bp.route('/active-summary', methods=['GET'])
@token_required
def get_active_exchange_summary(current_user_id):
    """How many active exchanges the caller has: 0, 1 or 2 (meaning "several").

    ``first_id`` is only set when there is exactly one, so the dashboard can
    link straight to it.
    """
    ids = [
        exchange_id for (exchange_id,) in Exchange.query.with_entities(Exchange.id).filter(
            _involves(current_user_id),
            Exchange.status.in_(ACTIVE_STATUSES)
        ).order_by(Exchange.updated_at.desc()).limit(2).all()
    ]

    return jsonify({
        'count': len(ids),
        'first_id': ids[0] if len(ids) == 1 else None
    }), 200


@exchanges_bp.route('/<int:exchange_id>', methods=['GET'])
@token_required
def get_exchange_by_id(current_user_id, exchange_id):
    exchange = get_exchange_or_404(exchange_id)
    require_party(exchange, current_user_id, 'You do not have permission to view this exchange.')

    return jsonify({'exchange': exchange.to_dict()}), 200
