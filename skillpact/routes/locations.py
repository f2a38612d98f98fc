"""Routes for the caller's own location and service radius."""

import logging

from flask import Blueprint, jsonify

from skillpact import db
from skillpact.errors import BadRequest
from skillpact.models import Location
from skillpact.routes.invalidation import invalidates
from skillpact.utils import token_required
from skillpact.utils.payloads import get_json_body, get_number, get_string

logger = logging.getLogger(__name__)

locations_bp = Blueprint('locations', __name__)

MIN_RADIUS_KM = 1
MAX_RADIUS_KM = 100

ADDRESS_FIELDS = {
    'address': 255,
    'city': 100,
    'state': 100,
    'country': 100,
}


def get_user_location(user_id):
    return Location.query.filter_by(user_id=user_id).first()


@locations_bp.route('/me', methods=['GET'])
@token_required
def get_my_location(current_user_id):
    location = get_user_location(current_user_id)
    return jsonify({'location': location.to_dict() if location else None}), 200


@locations_bp.route('/me', methods=['PUT', 'POST'])
@token_required
def set_location(current_user_id):
    """Create or replace the caller's location.

    Body params:
        - latitude (-90..90), longitude (-180..180): required
        - radius: km, 1..100
        - address, city, state, country: optional display fields
    """
    data = get_json_body()
    latitude = get_number(data, 'latitude', required=True, minimum=-90, maximum=90)
    longitude = get_number(data, 'longitude', required=True, minimum=-180, maximum=180)
    radius = get_number(data, 'radius', minimum=MIN_RADIUS_KM, maximum=MAX_RADIUS_KM)
    address = {key: get_string(data, key, max_length=length) for key, length in ADDRESS_FIELDS.items()}

    location = get_user_location(current_user_id)
    if location is None:
        location = Location(user_id=current_user_id)
        db.session.add(location)

    location.latitude = latitude
    location.longitude = longitude
    if 'radius' in data:
        location.radius = radius
    for key, value in address.items():
        if key in data:
            setattr(location, key, value or None)

    db.session.commit()

    logger.info('Location set for user %s', current_user_id)

    return jsonify({
        'location': location.to_dict(),
        'invalidates': invalidates('set_location')
    }), 200


@locations_bp.route('/radius', methods=['PUT'])
@token_required
def update_radius(current_user_id):
    """Change only the service radius; the caller must already have a location."""
    data = get_json_body()
    radius = get_number(data, 'radius', required=True, minimum=MIN_RADIUS_KM, maximum=MAX_RADIUS_KM)

    location = get_user_location(current_user_id)
    if location is None:
        raise BadRequest('Set your location before choosing a service radius')

    location.radius = radius
    db.session.commit()

    return jsonify({
        'location': location.to_dict(),
        'invalidates': invalidates('set_location')
    }), 200
