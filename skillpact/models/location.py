"""Location model shared by users and services."""

from datetime import datetime
from skillpact import db


class Location(db.Model):
    """A geographic point plus a service radius (km).

    Belongs to exactly one User or one Service. A user's radius both bounds
    the nearby-services search and switches that feature on: no radius, no
    nearby search.
    """

    __tablename__ = 'locations'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=True)
    service_id = db.Column(db.Integer, db.ForeignKey('services.id', ondelete='CASCADE'), unique=True, nullable=True)
    latitude = db.Column(db.Float, nullable=True, index=True)
    longitude = db.Column(db.Float, nullable=True, index=True)
    radius = db.Column(db.Float, nullable=True)  # km
    address = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(100), nullable=True)
    country = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint(
            '(user_id IS NULL) <> (service_id IS NULL)',
            name='location_single_owner'
        ),
    )

    @property
    def has_point(self):
        return self.latitude is not None and self.longitude is not None

    def to_dict(self):
        """Convert location to dictionary."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'service_id': self.service_id,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'radius': self.radius,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'country': self.country,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Location {self.id}: ({self.latitude}, {self.longitude}) r={self.radius}>'
