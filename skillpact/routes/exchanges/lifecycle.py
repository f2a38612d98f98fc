"""Exchange lifecycle routes (request, respond, schedule, complete, cancel).

    REQUESTED -> ACCEPTED -> SCHEDULED -> COMPLETED
    REQUESTED -> DECLINED
    REQUESTED | ACCEPTED | SCHEDULED -> CANCELLED

ACCEPTED -> COMPLETED is allowed directly; scheduling is optional.
DECLINED, CANCELLED and COMPLETED are terminal.
"""

import logging
from datetime import datetime

from flask import jsonify

from skillpact import db
from skillpact.errors import BadRequest, Conflict, Forbidden, NotFound
from skillpact.models import Exchange, ExchangeStatus, Service, ACTIVE_STATUSES
from skillpact.models.exchange import MIN_HOURS, MAX_HOURS
from skillpact.routes.exchanges import exchanges_bp
from skillpact.routes.exchanges.helpers import (
    get_exchange_or_404,
    get_user_or_404,
    require_party,
    guarded_update,
)
from skillpact.routes.invalidation import invalidates
from skillpact.routes.notifications import (
    notify_exchange_requested,
    notify_exchange_response,
    notify_exchange_scheduled,
    notify_exchange_completed,
    notify_exchange_cancelled,
)
from skillpact.utils import token_required
from skillpact.utils.payloads import (
    get_json_body,
    get_int,
    get_bool,
    get_number,
    get_string,
    get_datetime,
)

logger = logging.getLogger(__name__)

SCHEDULABLE_STATUSES = (ExchangeStatus.ACCEPTED, ExchangeStatus.SCHEDULED)


def _require_future(scheduled_date):
    if scheduled_date <= datetime.utcnow():
        raise BadRequest('scheduled_date must be in the future')


def _exchange_response(exchange, mutation, message, status_code=200):
    return jsonify({
        'message': message,
        'exchange': exchange.to_dict(),
        'invalidates': invalidates(mutation)
    }), status_code


@exchanges_bp.route('', methods=['POST'])
@token_required
def request_exchange(current_user_id):
    """Request a provider's service.

    Body params:
        - provider_service_id: service being requested (required)
        - requester_service_id: one of the caller's services offered in return
        - requested_date: ISO date the requester would like
        - message: short note shown to the provider
    """
    data = get_json_body()
    provider_service_id = get_int(data, 'provider_service_id', required=True)
    requester_service_id = get_int(data, 'requester_service_id')
    requested_date = get_datetime(data, 'requested_date')
    note = get_string(data, 'message', max_length=500)

    requester = get_user_or_404(current_user_id)

    service = db.session.get(Service, provider_service_id)
    if not service:
        raise NotFound('Service not found')

    if service.user_id == current_user_id:
        raise BadRequest('You cannot request your own service')

    if not service.is_active:
        raise BadRequest('This service is not currently available')

    if requester_service_id is not None:
        offered = db.session.get(Service, requester_service_id)
        if not offered or offered.user_id != current_user_id:
            raise BadRequest('requester_service_id must be one of your own services')

    existing = Exchange.query.filter(
        Exchange.requester_id == current_user_id,
        Exchange.provider_service_id == provider_service_id,
        Exchange.status.in_(ACTIVE_STATUSES)
    ).first()
    if existing:
        raise Conflict('An active exchange request for this service already exists.')

    exchange = Exchange(
        status=ExchangeStatus.REQUESTED,
        provider_id=service.user_id,
        requester_id=current_user_id,
        provider_service_id=service.id,
        requester_service_id=requester_service_id,
        requested_date=requested_date
    )
    db.session.add(exchange)
    db.session.commit()

    logger.info('Exchange %s requested by user %s for service %s', exchange.id, current_user_id, service.id)

    notify_exchange_requested(exchange, requester, note)

    return _exchange_response(exchange, 'request_exchange', 'Exchange requested', 201)


@exchanges_bp.route('/<int:exchange_id>/respond', methods=['POST'])
@token_required
def respond_to_request(current_user_id, exchange_id):
    """Provider accepts or declines a request.

    Body params:
        - accept: true to accept, false to decline (required)
        - scheduled_date: optional ISO date, only used when accepting
    """
    exchange = get_exchange_or_404(exchange_id)

    if exchange.provider_id != current_user_id:
        raise Forbidden('Only the service provider can respond to this request')

    data = get_json_body()
    accept = get_bool(data, 'accept', required=True)
    scheduled_date = get_datetime(data, 'scheduled_date') if accept else None
    if scheduled_date is not None:
        _require_future(scheduled_date)

    if exchange.status != ExchangeStatus.REQUESTED:
        raise BadRequest('This exchange request has already been processed')

    values = {'status': ExchangeStatus.ACCEPTED if accept else ExchangeStatus.DECLINED}
    if scheduled_date is not None:
        values['scheduled_date'] = scheduled_date

    guarded_update(exchange, values)

    logger.info('Exchange %s %s by provider %s', exchange.id, exchange.status, current_user_id)

    notify_exchange_response(exchange, accept)

    return _exchange_response(
        exchange,
        'respond_to_request',
        'Exchange accepted' if accept else 'Exchange declined'
    )


@exchanges_bp.route('/<int:exchange_id>/schedule', methods=['POST'])
@token_required
def schedule_exchange(current_user_id, exchange_id):
    """Either party sets (or moves) the meeting date of an accepted exchange."""
    exchange = get_exchange_or_404(exchange_id)
    require_party(exchange, current_user_id)

    data = get_json_body()
    scheduled_date = get_datetime(data, 'scheduled_date', required=True)
    _require_future(scheduled_date)

    if exchange.status not in SCHEDULABLE_STATUSES:
        raise BadRequest('This exchange cannot be scheduled at this time')

    guarded_update(exchange, {
        'status': ExchangeStatus.SCHEDULED,
        'scheduled_date': scheduled_date
    })

    notify_exchange_scheduled(exchange, current_user_id)

    return _exchange_response(exchange, 'schedule_exchange', 'Exchange scheduled')


@exchanges_bp.route('/<int:exchange_id>/complete', methods=['POST'])
@token_required
def complete_exchange(current_user_id, exchange_id):
    """Either party marks an accepted or scheduled exchange as completed.

    Body params:
        - hours: optional duration, between 0.5 and 24
    """
    exchange = get_exchange_or_404(exchange_id)
    require_party(exchange, current_user_id)

    data = get_json_body()
    hours = get_number(data, 'hours', minimum=MIN_HOURS, maximum=MAX_HOURS)

    if exchange.status not in SCHEDULABLE_STATUSES:
        raise BadRequest('This exchange cannot be completed at this time')

    values = {
        'status': ExchangeStatus.COMPLETED,
        'completed_date': datetime.utcnow()
    }
    if hours is not None:
        values['hours'] = hours

    guarded_update(exchange, values)

    logger.info('Exchange %s completed by user %s (hours=%s)', exchange.id, current_user_id, hours)

    notify_exchange_completed(exchange, current_user_id)

    return _exchange_response(
        exchange,
        'complete_exchange',
        'Exchange completed! Both parties can now leave ratings.'
    )


@exchanges_bp.route('/<int:exchange_id>/cancel', methods=['POST'])
@token_required
def cancel_exchange(current_user_id, exchange_id):
    """Either party cancels an exchange that is still active."""
    exchange = get_exchange_or_404(exchange_id)
    require_party(exchange, current_user_id)

    if exchange.status not in ACTIVE_STATUSES:
        raise BadRequest(f'Exchange cannot be cancelled in its current state ({exchange.status})')

    guarded_update(exchange, {'status': ExchangeStatus.CANCELLED})

    logger.info('Exchange %s cancelled by user %s', exchange.id, current_user_id)

    notify_exchange_cancelled(exchange, current_user_id)

    return _exchange_response(exchange, 'cancel_exchange', 'Exchange has been cancelled.')
