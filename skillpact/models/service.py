"""Service and category models (e.g., Guitar lessons - 2 credits/hr)."""

from datetime import datetime
from skillpact import db


class LocationType:
    """Where a service takes place."""
    OWN = 'OWN'            # at the provider's place
    CLIENT = 'CLIENT'      # at the requester's place
    REMOTE = 'REMOTE'
    FLEXIBLE = 'FLEXIBLE'

    ALL = (OWN, CLIENT, REMOTE, FLEXIBLE)


class ServiceCategory(db.Model):
    """Category a service can be filed under."""

    __tablename__ = 'service_categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.String(255), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
        }

    def __repr__(self):
        return f'<ServiceCategory {self.name}>'


class Service(db.Model):
    """A skill a user offers to neighbours in exchange for credits."""

    __tablename__ = 'services'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey('service_categories.id'), nullable=True, index=True)
    title = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    hourly_rate = db.Column(db.Float, default=0, nullable=False)  # credits per hour
    location_type = db.Column(db.String(20), default=LocationType.FLEXIBLE, nullable=False)
    service_radius = db.Column(db.Float, nullable=True)  # km
    tags = db.Column(db.String(255), nullable=True)  # comma separated
    image_url = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    category = db.relationship('ServiceCategory', backref=db.backref('services', lazy='dynamic'))
    location = db.relationship(
        'Location',
        backref='service',
        uselist=False,
        foreign_keys='Location.service_id',
        cascade='all, delete-orphan'
    )

    def get_point(self):
        """Return the (lat, lng) this service is offered from, if known.

        A service without its own location is offered from its owner's.
        """
        location = self.location
        if location is None or not location.has_point:
            location = self.user.location if self.user else None
        if location is None or not location.has_point:
            return None
        return location.latitude, location.longitude

    def to_dict(self, include_user=False):
        """Convert service to dictionary."""
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'category_id': self.category_id,
            'category': self.category.to_dict() if self.category else None,
            'title': self.title,
            'description': self.description,
            'hourly_rate': self.hourly_rate,
            'location_type': self.location_type,
            'service_radius': self.service_radius,
            'tags': [t.strip() for t in self.tags.split(',') if t.strip()] if self.tags else [],
            'image_url': self.image_url,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }
        if include_user and self.user:
            data['user'] = {
                'id': self.user.id,
                'name': self.user.name,
                'image': self.user.image,
                'average_rating': self.user.average_rating,
                'rating_count': self.user.rating_count,
            }
        return data

    def __repr__(self):
        return f'<Service {self.id}: {self.title}>'
