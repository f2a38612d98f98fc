"""User and skill models."""

from datetime import datetime
from skillpact import db


class User(db.Model):
    """A marketplace member. Identity comes from the external auth provider."""

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(191), nullable=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    image = db.Column(db.String(500), nullable=True)
    credits = db.Column(db.Integer, default=0, nullable=False)

    # Aggregate of ratings received on completed exchanges, recomputed on every new rating
    average_rating = db.Column(db.Float, nullable=True)
    rating_count = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    services = db.relationship('Service', backref='user', lazy='dynamic', foreign_keys='Service.user_id')
    location = db.relationship(
        'Location',
        backref='user',
        uselist=False,
        foreign_keys='Location.user_id',
        cascade='all, delete-orphan'
    )
    skills = db.relationship('Skill', backref='user', lazy=True, cascade='all, delete-orphan')

    def to_dict(self, include_private=False):
        """Convert user to dictionary."""
        data = {
            'id': self.id,
            'name': self.name,
            'image': self.image,
            'average_rating': self.average_rating,
            'rating_count': self.rating_count,
            'created_at': self.created_at.isoformat(),
        }
        if include_private:
            data.update({
                'email': self.email,
                'credits': self.credits,
                'updated_at': self.updated_at.isoformat(),
            })
        return data

    def __repr__(self):
        return f'<User {self.id}: {self.email}>'


class Skill(db.Model):
    """Free-text skill a user lists on their profile."""

    __tablename__ = 'skills'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # A user can list each skill once
    __table_args__ = (
        db.UniqueConstraint('user_id', 'name', name='unique_user_skill'),
    )

    def to_dict(self):
        return {'id': self.id, 'name': self.name}

    def __repr__(self):
        return f'<Skill {self.name} (user {self.user_id})>'
