"""Rating routes.

RATINGS ARE RESTRICTED TO COMPLETED EXCHANGES ONLY.
Each party rates the other once per exchange, stored on the exchange itself:
- the provider's rating of the requester goes to ``provider_rating``
- the requester's rating of the provider goes to ``requester_rating``

Whenever a rating is recorded, the rated user's ``average_rating`` and
``rating_count`` are recomputed from scratch over all their completed,
rated exchanges.
"""

import logging

from flask import Blueprint, jsonify
from sqlalchemy import or_, and_

from skillpact import db
from skillpact.errors import BadRequest, Forbidden, NotFound
from skillpact.models import Exchange, ExchangeStatus, User
from skillpact.routes.exchanges.helpers import exchange_query, guarded_update
from skillpact.routes.invalidation import invalidates
from skillpact.routes.notifications import notify_new_rating
from skillpact.utils import token_required, user_summary
from skillpact.utils.dates import utc_isoformat
from skillpact.utils.payloads import get_json_body, get_int, get_string

logger = logging.getLogger(__name__)

ratings_bp = Blueprint('ratings', __name__)

MAX_REVIEW_LENGTH = 2000


def recalculate_user_rating(user_id):
    """Recompute and store a user's rating aggregate. Returns (average, count).

    Full rescan of every COMPLETED exchange where the user received a rating:
    as provider they are rated through ``requester_rating``, as requester
    through ``provider_rating``. Running it repeatedly gives the same result.
    """
    rows = Exchange.query.with_entities(
        Exchange.provider_id,
        Exchange.requester_id,
        Exchange.provider_rating,
        Exchange.requester_rating
    ).filter(
        Exchange.status == ExchangeStatus.COMPLETED,
        or_(
            and_(Exchange.provider_id == user_id, Exchange.requester_rating.isnot(None)),
            and_(Exchange.requester_id == user_id, Exchange.provider_rating.isnot(None))
        )
    ).all()

    total = 0
    count = 0
    for provider_id, requester_id, provider_rating, requester_rating in rows:
        if provider_id == user_id and requester_rating is not None:
            total += requester_rating
            count += 1
        elif requester_id == user_id and provider_rating is not None:
            total += provider_rating
            count += 1

    average = total / count if count else None

    User.query.filter_by(id=user_id).update({
        'average_rating': average,
        'rating_count': count
    }, synchronize_session=False)
    db.session.commit()

    return average, count


@ratings_bp.route('', methods=['POST'])
@token_required
def create_rating(current_user_id):
    """Rate the other party of a completed exchange.

    Body params:
        - exchange_id: the exchange (required)
        - rating: integer 1-5 (required)
        - review: optional text
    """
    data = get_json_body()
    exchange_id = get_int(data, 'exchange_id', required=True)
    rating = data.get('rating')
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise BadRequest('Rating must be a whole number between 1 and 5')
    if not (1 <= rating <= 5):
        raise BadRequest('Rating must be between 1 and 5')
    review = get_string(data, 'review', max_length=MAX_REVIEW_LENGTH) or None

    exchange = db.session.get(Exchange, exchange_id)
    if not exchange:
        raise NotFound('Exchange not found.')

    is_provider = exchange.provider_id == current_user_id
    is_requester = exchange.requester_id == current_user_id
    if not is_provider and not is_requester:
        raise Forbidden('You are not part of this exchange.')

    if exchange.status != ExchangeStatus.COMPLETED:
        raise BadRequest('Cannot rate an exchange that is not completed.')

    if is_provider:
        rating_column, review_column = Exchange.provider_rating, 'provider_review'
    else:
        rating_column, review_column = Exchange.requester_rating, 'requester_review'

    if getattr(exchange, rating_column.key) is not None:
        raise BadRequest('You have already rated this exchange.')

    # The IS NULL guard keeps a concurrent second submission from overwriting
    guarded_update(
        exchange,
        {rating_column.key: rating, review_column: review},
        rating_column.is_(None)
    )

    rated_user_id = exchange.other_party_id(current_user_id)
    average, count = recalculate_user_rating(rated_user_id)

    logger.info('User %s rated user %s %s/5 on exchange %s', current_user_id, rated_user_id, rating, exchange.id)

    rater = db.session.get(User, current_user_id)
    notify_new_rating(exchange, current_user_id, rater, rated_user_id, rating)

    return jsonify({
        'success': True,
        'rated_user': {
            'id': rated_user_id,
            'average_rating': average,
            'rating_count': count
        },
        'invalidates': invalidates('create_rating')
    }), 201


def _rating_entry(exchange, prefix, rating, comment, counterpart):
    return {
        'id': f'{prefix}-{exchange.id}',
        'rating': rating,
        'comment': comment,
        'created_at': utc_isoformat(exchange.completed_date or exchange.updated_at),
        'from_user': user_summary(counterpart),
        'exchange': {
            'id': exchange.id,
            'provider_service': {
                'id': exchange.provider_service.id,
                'title': exchange.provider_service.title
            } if exchange.provider_service else None
        }
    }


def _newest_first(entries):
    return sorted(entries, key=lambda r: r['created_at'] or '', reverse=True)


@ratings_bp.route('/received', methods=['GET'])
@token_required
def get_received_ratings(current_user_id):
    """Ratings other people gave the caller."""
    as_provider = exchange_query().filter(
        Exchange.provider_id == current_user_id,
        Exchange.requester_rating.isnot(None),
        Exchange.status == ExchangeStatus.COMPLETED
    ).all()
    as_requester = exchange_query().filter(
        Exchange.requester_id == current_user_id,
        Exchange.provider_rating.isnot(None),
        Exchange.status == ExchangeStatus.COMPLETED
    ).all()

    ratings = [
        _rating_entry(e, 'provider', e.requester_rating, e.requester_review, e.requester)
        for e in as_provider
    ] + [
        _rating_entry(e, 'requester', e.provider_rating, e.provider_review, e.provider)
        for e in as_requester
    ]

    return jsonify({'ratings': _newest_first(ratings)}), 200


@ratings_bp.route('/given', methods=['GET'])
@token_required
def get_given_ratings(current_user_id):
    """Ratings the caller gave; ``from_user`` is the person who was rated."""
    as_provider = exchange_query().filter(
        Exchange.provider_id == current_user_id,
        Exchange.provider_rating.isnot(None),
        Exchange.status == ExchangeStatus.COMPLETED
    ).all()
    as_requester = exchange_query().filter(
        Exchange.requester_id == current_user_id,
        Exchange.requester_rating.isnot(None),
        Exchange.status == ExchangeStatus.COMPLETED
    ).all()

    ratings = [
        _rating_entry(e, 'provider', e.provider_rating, e.provider_review, e.requester)
        for e in as_provider
    ] + [
        _rating_entry(e, 'requester', e.requester_rating, e.requester_review, e.provider)
        for e in as_requester
    ]

    return jsonify({'ratings': _newest_first(ratings)}), 200


@ratings_bp.route('/user/<int:user_id>/reviews', methods=['GET'])
def get_user_reviews(user_id):
    """Public written reviews a user received, newest first."""
    if not db.session.get(User, user_id):
        raise NotFound('User not found.')

    exchanges = exchange_query().filter(
        Exchange.status == ExchangeStatus.COMPLETED,
        or_(
            and_(Exchange.provider_id == user_id, Exchange.requester_review.isnot(None)),
            and_(Exchange.requester_id == user_id, Exchange.provider_review.isnot(None))
        )
    ).all()

    reviews = []
    for exchange in exchanges:
        if exchange.provider_id == user_id and exchange.requester_rating is not None:
            rating, review, reviewer = exchange.requester_rating, exchange.requester_review, exchange.requester
        elif exchange.requester_id == user_id and exchange.provider_rating is not None:
            rating, review, reviewer = exchange.provider_rating, exchange.provider_review, exchange.provider
        else:
            continue

        reviews.append({
            'exchange_id': exchange.id,
            'rating': rating,
            'review': review,
            'date': utc_isoformat(exchange.completed_date),
            'reviewer': {
                'id': reviewer.id,
                'name': reviewer.name or 'Anonymous',
                'image': reviewer.image
            } if reviewer else None,
            'service_title': exchange.provider_service.title if exchange.provider_service else 'Service'
        })

    reviews.sort(key=lambda r: r['date'] or '', reverse=True)

    return jsonify({'reviews': reviews, 'total': len(reviews)}), 200
