"""User profile routes: own profile, completion, dashboard stats, public profiles."""

import logging

from flask import Blueprint, jsonify
from sqlalchemy import or_

from skillpact import db
from skillpact.errors import BadRequest, NotFound
from skillpact.models import Exchange, ExchangeStatus, Location, Notification, Service, Skill, User
from skillpact.routes.invalidation import invalidates
from skillpact.routes.locations import MIN_RADIUS_KM, MAX_RADIUS_KM, get_user_location
from skillpact.utils import token_required
from skillpact.utils.payloads import get_json_body, get_number, get_string

logger = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__)

MAX_SKILL_LENGTH = 100


def _get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound('User not found')
    return user


def _profile_dict(user):
    data = user.to_dict(include_private=True)
    data['location'] = user.location.to_dict() if user.location else None
    data['skills'] = [s.to_dict() for s in sorted(user.skills, key=lambda s: s.name.lower())]
    return data


@users_bp.route('/me', methods=['GET'])
@token_required
def get_profile(current_user_id):
    """Get current user profile with location and skills."""
    user = _get_user_or_404(current_user_id)
    return jsonify({'user': _profile_dict(user)}), 200


@users_bp.route('/me/completion', methods=['GET'])
@token_required
def get_profile_completion(current_user_id):
    """How complete the caller's profile is, out of six checks."""
    user = _get_user_or_404(current_user_id)
    location = user.location

    checks = {
        'has_name': bool(user.name),
        'has_image': bool(user.image),
        'has_location': location is not None,
        'has_service_radius': location is not None and location.radius is not None,
        'has_skills': len(user.skills) > 0,
        'has_services': user.services.filter(Service.is_active.is_(True)).count() > 0,
    }
    completed = sum(1 for done in checks.values() if done)

    result = {'percentage': round(completed / len(checks) * 100)}
    result.update(checks)
    return jsonify(result), 200


@users_bp.route('/me', methods=['PATCH', 'PUT'])
@token_required
def update_profile(current_user_id):
    """Update the caller's profile.

    Body params (all optional, at least one required):
        - name: 1-191 chars
        - image: URL or null
        - location_string: free text address
        - radius: km, 1..100
        - skills: list of skill names to add
    """
    data = get_json_body()
    user = _get_user_or_404(current_user_id)
    updated = []

    if 'name' in data:
        user.name = get_string(data, 'name', required=True, max_length=191)
        updated.append('name')

    if 'image' in data:
        user.image = get_string(data, 'image', max_length=500) or None
        updated.append('image')

    if 'location_string' in data or 'radius' in data:
        location_string = get_string(data, 'location_string', max_length=255)
        radius = get_number(data, 'radius', minimum=MIN_RADIUS_KM, maximum=MAX_RADIUS_KM)

        location = get_user_location(current_user_id)
        if location is None:
            location = Location(user_id=current_user_id)
            db.session.add(location)
        if 'location_string' in data:
            location.address = location_string or None
            updated.append('location_string')
        if 'radius' in data:
            location.radius = radius
            updated.append('radius')

    if 'skills' in data:
        skills = data.get('skills')
        if not isinstance(skills, list) or not all(isinstance(s, str) and s.strip() for s in skills):
            raise BadRequest('skills must be a list of non-empty strings')
        if any(len(s.strip()) > MAX_SKILL_LENGTH for s in skills):
            raise BadRequest(f'Skill names must be at most {MAX_SKILL_LENGTH} characters')

        # Skills are added, never removed, by a profile update
        existing = {s.name for s in user.skills}
        for name in dict.fromkeys(s.strip() for s in skills):
            if name not in existing:
                user.skills.append(Skill(name=name))
        updated.append('skills')

    if not updated:
        raise BadRequest('No fields provided for update')

    db.session.commit()

    logger.info('Profile of user %s updated (%s)', current_user_id, ', '.join(updated))

    return jsonify({
        'user': _profile_dict(user),
        'invalidates': invalidates('update_profile')
    }), 200


@users_bp.route('/me/stats', methods=['GET'])
@token_required
def get_dashboard_stats(current_user_id):
    """Dashboard counters for the caller.

    Services offered/received count completed exchanges as provider and as
    requester; hours banked sums the hours of those provided.
    """
    unread_notifications_count = Notification.query.filter_by(
        recipient_id=current_user_id, is_read=False
    ).count()

    completed = Exchange.query.with_entities(
        Exchange.provider_id, Exchange.hours
    ).filter(
        Exchange.status == ExchangeStatus.COMPLETED,
        or_(Exchange.provider_id == current_user_id, Exchange.requester_id == current_user_id)
    ).all()

    services_offered_count = 0
    services_received_count = 0
    hours_banked = 0
    for provider_id, hours in completed:
        if provider_id == current_user_id:
            services_offered_count += 1
            hours_banked += hours or 0
        else:
            services_received_count += 1

    return jsonify({
        'unread_notifications_count': unread_notifications_count,
        'services_offered_count': services_offered_count,
        'services_received_count': services_received_count,
        'hours_banked': hours_banked
    }), 200


@users_bp.route('/<int:user_id>', methods=['GET'])
def get_user_by_id(user_id):
    """Public profile: no email, coarse location only, active services."""
    user = _get_user_or_404(user_id)

    data = user.to_dict()
    data['location'] = {
        'city': user.location.city,
        'state': user.location.state,
    } if user.location else None
    data['skills'] = [s.to_dict() for s in user.skills]
    data['services'] = [
        s.to_dict() for s in user.services.filter(Service.is_active.is_(True)).order_by(Service.created_at.desc())
    ]

    return jsonify({'user': data}), 200
