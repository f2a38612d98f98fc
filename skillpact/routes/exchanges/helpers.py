"""Shared helper functions for exchange routes."""

import logging
from datetime import datetime

from sqlalchemy.orm import joinedload

from skillpact import db
from skillpact.errors import Conflict, Forbidden, NotFound
from skillpact.models import Exchange, User

logger = logging.getLogger(__name__)


def exchange_query():
    """Exchange query with both parties and services eager loaded."""
    return Exchange.query.options(
        joinedload(Exchange.provider),
        joinedload(Exchange.requester),
        joinedload(Exchange.provider_service),
        joinedload(Exchange.requester_service)
    )


def get_exchange_or_404(exchange_id):
    exchange = exchange_query().filter(Exchange.id == exchange_id).first()
    if not exchange:
        raise NotFound('Exchange not found')
    return exchange


def get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound('User not found')
    return user


def require_party(exchange, user_id, message='You are not part of this exchange'):
    """Raise Forbidden unless ``user_id`` is the provider or the requester."""
    if not exchange.is_party(user_id):
        raise Forbidden(message)


def guarded_update(exchange, values, *conditions):
    """Atomically update an exchange only if it is still in the state we read.

    Runs ``UPDATE exchanges SET ... WHERE id = ? AND status = <status read>``
    (plus any extra ``conditions``) and commits. If another request changed
    the row in between, nothing is written and Conflict is raised.
    """
    expected_status = exchange.status
    values = dict(values)
    values.setdefault('updated_at', datetime.utcnow())

    updated = Exchange.query.filter(
        Exchange.id == exchange.id,
        Exchange.status == expected_status,
        *conditions
    ).update(values, synchronize_session=False)

    if updated != 1:
        db.session.rollback()
        logger.info('Concurrent modification of exchange %s (expected %s)', exchange.id, expected_status)
        raise Conflict('This exchange was changed by someone else. Please refresh and try again.')

    db.session.commit()
    db.session.refresh(exchange)
    return exchange
