"""Service catalogue routes: CRUD, browse and nearby search."""

import logging
from dataclasses import dataclass, fields

from flask import Blueprint, request, jsonify, current_app
from sqlalchemy import func, or_
from sqlalchemy.orm import aliased, joinedload

from skillpact import db
from skillpact.errors import BadRequest, Conflict, NotFound, PreconditionFailed
from skillpact.models import (
    Exchange,
    Location,
    LocationType,
    Service,
    ServiceCategory,
    User,
    ACTIVE_STATUSES,
)
from skillpact.routes.invalidation import invalidates
from skillpact.utils import token_required, token_optional
from skillpact.utils.geo import get_bounding_box, distance, longitude_ranges
from skillpact.utils.payloads import get_json_body, get_int, get_number, get_string, get_bool

logger = logging.getLogger(__name__)

services_bp = Blueprint('services', __name__)

NEARBY_PRECONDITION_MESSAGE = (
    'Please set your location and service radius in your profile to see nearby services.'
)


class _Unset:
    def __repr__(self):
        return 'UNSET'


UNSET = _Unset()


@dataclass
class ServiceUpdate:
    """Partial update of a service. Fields left UNSET are not touched."""

    title: object = UNSET
    description: object = UNSET
    category_id: object = UNSET
    hourly_rate: object = UNSET
    location_type: object = UNSET
    service_radius: object = UNSET
    tags: object = UNSET
    image_url: object = UNSET
    is_active: object = UNSET

    @classmethod
    def from_payload(cls, data):
        update = cls()
        if 'title' in data:
            update.title = get_string(data, 'title', required=True, min_length=3, max_length=100)
        if 'description' in data:
            update.description = get_string(data, 'description', required=True, max_length=1000)
        if 'category_id' in data:
            update.category_id = get_int(data, 'category_id')
        if 'hourly_rate' in data:
            update.hourly_rate = get_number(data, 'hourly_rate', required=True, minimum=0, maximum=1000)
        if 'location_type' in data:
            update.location_type = _location_type(data, required=True)
        if 'service_radius' in data:
            update.service_radius = get_number(data, 'service_radius', minimum=1, maximum=100)
        if 'tags' in data:
            update.tags = _tags(data)
        if 'image_url' in data:
            update.image_url = get_string(data, 'image_url', max_length=500) or None
        if 'is_active' in data:
            update.is_active = get_bool(data, 'is_active', required=True)
        return update

    def provided(self):
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not UNSET}

    def changes(self, service):
        """Provided values that differ from what the service currently holds."""
        return {
            name: value for name, value in self.provided().items()
            if getattr(service, name) != value
        }


def _location_type(data, required=False):
    value = get_string(data, 'location_type', required=required)
    if value is None:
        return None
    value = value.upper()
    if value not in LocationType.ALL:
        raise BadRequest(f"location_type must be one of: {', '.join(LocationType.ALL)}")
    return value


def _tags(data):
    """Accept tags as a list or a comma separated string; stored comma separated."""
    value = data.get('tags')
    if value is None:
        return None
    if isinstance(value, list):
        if not all(isinstance(t, str) for t in value):
            raise BadRequest('tags must be a list of strings')
        tags = [t.strip() for t in value if t.strip()]
    elif isinstance(value, str):
        tags = [t.strip() for t in value.split(',') if t.strip()]
    else:
        raise BadRequest('tags must be a list or a comma separated string')
    joined = ','.join(tags)
    if len(joined) > 255:
        raise BadRequest('tags must be at most 255 characters')
    return joined or None


def _check_category(category_id):
    if category_id is not None and not db.session.get(ServiceCategory, category_id):
        raise BadRequest('Category not found')


def _service_query():
    return Service.query.options(
        joinedload(Service.category),
        joinedload(Service.user),
        joinedload(Service.location)
    )


def get_owned_service_or_404(service_id, user_id, message='Service not found or does not belong to you'):
    service = Service.query.filter_by(id=service_id, user_id=user_id).first()
    if not service:
        raise NotFound(message)
    return service


@services_bp.route('', methods=['POST'])
@token_required
def create_service(current_user_id):
    """Create a new service.

    Body params:
        - title (5-100 chars), description (10-500 chars), hourly_rate (0-1000): required
        - category_id, location_type, service_radius (1-100 km), tags, image_url: optional
        - latitude/longitude: optional point for OWN services offered away from home
    """
    data = get_json_body()

    title = get_string(data, 'title', required=True, min_length=5, max_length=100)
    description = get_string(data, 'description', required=True, min_length=10, max_length=500)
    hourly_rate = get_number(data, 'hourly_rate', required=True, minimum=0, maximum=1000)
    category_id = get_int(data, 'category_id')
    location_type = _location_type(data) or LocationType.FLEXIBLE
    service_radius = get_number(data, 'service_radius', minimum=1, maximum=100)
    tags = _tags(data)
    image_url = get_string(data, 'image_url', max_length=500) or None
    latitude = get_number(data, 'latitude', minimum=-90, maximum=90)
    longitude = get_number(data, 'longitude', minimum=-180, maximum=180)

    if (latitude is None) != (longitude is None):
        raise BadRequest('latitude and longitude must be given together')

    _check_category(category_id)

    service = Service(
        user_id=current_user_id,
        category_id=category_id,
        title=title,
        description=description,
        hourly_rate=hourly_rate,
        location_type=location_type,
        service_radius=service_radius,
        tags=tags,
        image_url=image_url,
        is_active=True
    )
    if latitude is not None:
        service.location = Location(latitude=latitude, longitude=longitude, radius=service_radius)

    db.session.add(service)
    db.session.commit()

    logger.info('Service %s created by user %s', service.id, current_user_id)

    return jsonify({
        'message': 'Service created successfully',
        'service': service.to_dict(include_user=True),
        'invalidates': invalidates('create_service')
    }), 201


@services_bp.route('/<int:service_id>', methods=['PATCH', 'PUT'])
@token_required
def update_service(current_user_id, service_id):
    """Update the fields given in the body; everything else is left as is."""
    service = get_owned_service_or_404(service_id, current_user_id)

    update = ServiceUpdate.from_payload(get_json_body())
    if not update.provided():
        raise BadRequest('No fields provided for update')

    changes = update.changes(service)
    if 'category_id' in changes:
        _check_category(changes['category_id'])

    for name, value in changes.items():
        setattr(service, name, value)

    if changes:
        db.session.commit()
        logger.info('Service %s updated (%s)', service.id, ', '.join(sorted(changes)))

    return jsonify({
        'message': 'Service updated successfully',
        'service': service.to_dict(include_user=True),
        'updated_fields': sorted(changes),
        'invalidates': invalidates('update_service')
    }), 200


@services_bp.route('/<int:service_id>', methods=['DELETE'])
@token_required
def delete_service(current_user_id, service_id):
    """Delete one of the caller's services.

    Refused while any exchange for it is still REQUESTED, ACCEPTED or SCHEDULED.
    """
    service = get_owned_service_or_404(
        service_id, current_user_id,
        'Service not found or you do not have permission to delete it.'
    )

    active_exchanges = Exchange.query.filter(
        or_(
            Exchange.provider_service_id == service.id,
            Exchange.requester_service_id == service.id
        ),
        Exchange.status.in_(ACTIVE_STATUSES)
    ).count()
    if active_exchanges > 0:
        raise Conflict(
            'This service cannot be deleted because it is involved in active exchanges. '
            'Please complete or cancel them first.'
        )

    # Finished exchanges keep their history; only the link to the service goes
    Exchange.query.filter(Exchange.provider_service_id == service.id).update(
        {'provider_service_id': None}, synchronize_session=False
    )
    Exchange.query.filter(Exchange.requester_service_id == service.id).update(
        {'requester_service_id': None}, synchronize_session=False
    )

    db.session.delete(service)
    db.session.commit()

    logger.info('Service %s deleted by user %s', service_id, current_user_id)

    return jsonify({'success': True, 'invalidates': invalidates('delete_service')}), 200


@services_bp.route('/mine', methods=['GET'])
@token_required
def get_my_services(current_user_id):
    """The caller's services, newest first.

    Query params:
        - include_inactive: 'true' to include deactivated services
    """
    include_inactive = request.args.get('include_inactive', 'false').lower() == 'true'

    query = _service_query().filter(Service.user_id == current_user_id)
    if not include_inactive:
        query = query.filter(Service.is_active.is_(True))

    services = query.order_by(Service.created_at.desc()).all()

    return jsonify({'services': [s.to_dict() for s in services], 'total': len(services)}), 200


@services_bp.route('/user/<int:user_id>', methods=['GET'])
def get_user_services(user_id):
    """Public list of a user's active services."""
    if not db.session.get(User, user_id):
        raise NotFound('User not found')

    services = _service_query().filter(
        Service.user_id == user_id,
        Service.is_active.is_(True)
    ).order_by(Service.created_at.desc()).all()

    return jsonify({'services': [s.to_dict(include_user=True) for s in services]}), 200


@services_bp.route('/<int:service_id>', methods=['GET'])
def get_service_by_id(service_id):
    service = _service_query().filter(Service.id == service_id).first()
    if not service:
        raise NotFound('Service not found')

    data = service.to_dict(include_user=True)
    data['location'] = service.location.to_dict() if service.location else None
    return jsonify({'service': data}), 200


@services_bp.route('/categories', methods=['GET'])
def get_categories():
    categories = ServiceCategory.query.order_by(ServiceCategory.name.asc()).all()
    return jsonify({'categories': [c.to_dict() for c in categories]}), 200


@services_bp.route('/browse', methods=['GET'])
@token_optional
def browse_services(current_user_id):
    """Browse active services, newest first.

    Signed-in callers do not see their own services.

    Query params:
        - category_id: only services in this category
    """
    category_id = request.args.get('category_id', type=int)

    query = _service_query().filter(Service.is_active.is_(True))
    if current_user_id is not None:
        query = query.filter(Service.user_id != current_user_id)
    if category_id is not None:
        query = query.filter(Service.category_id == category_id)

    services = query.order_by(Service.created_at.desc(), Service.id.desc()).all()

    return jsonify({'services': [s.to_dict(include_user=True) for s in services]}), 200


@services_bp.route('/nearby', methods=['GET'])
@token_required
def get_nearby_services(current_user_id):
    """Active OWN-location services of other users within the caller's radius.

    Query params:
        - limit: max results (default 10, max 50)

    Each service is placed at its own location, or at its owner's location
    when it has none. Results are sorted by distance (km), closest first.
    """
    default_limit = current_app.config['NEARBY_DEFAULT_LIMIT']
    max_limit = current_app.config['NEARBY_MAX_LIMIT']
    limit = request.args.get('limit', default_limit, type=int)
    if limit < 1 or limit > max_limit:
        raise BadRequest(f'limit must be between 1 and {max_limit}')

    origin = Location.query.filter_by(user_id=current_user_id).first()
    if origin is None or not origin.has_point or origin.radius is None:
        raise PreconditionFailed(NEARBY_PRECONDITION_MESSAGE)

    lat, lng, radius = origin.latitude, origin.longitude, origin.radius
    min_lat, max_lat, min_lng, max_lng = get_bounding_box(lat, lng, radius)

    service_location = aliased(Location)
    owner_location = aliased(Location)
    point_lat = func.coalesce(service_location.latitude, owner_location.latitude)
    point_lng = func.coalesce(service_location.longitude, owner_location.longitude)

    candidates = _service_query().outerjoin(
        service_location, service_location.service_id == Service.id
    ).outerjoin(
        owner_location, owner_location.user_id == Service.user_id
    ).filter(
        Service.is_active.is_(True),
        Service.location_type == LocationType.OWN,
        Service.user_id != current_user_id,
        point_lat.between(min_lat, max_lat),
        or_(*[point_lng.between(low, high) for low, high in longitude_ranges(min_lng, max_lng)])
    ).all()

    nearby = []
    for service in candidates:
        point = service.get_point()
        if point is None:
            continue
        km = distance(lat, lng, point[0], point[1])
        if km <= radius:
            nearby.append((km, service))

    nearby.sort(key=lambda item: (item[0], item[1].id))

    results = []
    for km, service in nearby[:limit]:
        data = service.to_dict(include_user=True)
        data['distance'] = round(km, 2)
        results.append(data)

    return jsonify({
        'services': results,
        'total': len(nearby),
        'radius': radius
    }), 200
