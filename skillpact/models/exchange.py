"""Exchange model: one skill-for-credit transaction between two users."""

from datetime import datetime
from skillpact import db
from skillpact.utils.dates import utc_isoformat
from skillpact.utils.user_helpers import user_summary


class ExchangeStatus:
    REQUESTED = 'REQUESTED'
    ACCEPTED = 'ACCEPTED'
    DECLINED = 'DECLINED'
    SCHEDULED = 'SCHEDULED'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'

    ALL = (REQUESTED, ACCEPTED, DECLINED, SCHEDULED, COMPLETED, CANCELLED)


# Non-terminal states; chat is open and the provider's service cannot be deleted
ACTIVE_STATUSES = (ExchangeStatus.REQUESTED, ExchangeStatus.ACCEPTED, ExchangeStatus.SCHEDULED)
TERMINAL_STATUSES = (ExchangeStatus.DECLINED, ExchangeStatus.COMPLETED, ExchangeStatus.CANCELLED)

MIN_HOURS = 0.5
MAX_HOURS = 24


class Exchange(db.Model):
    """Exchange between a provider (owner of the service) and a requester.

    Never deleted; DECLINED, CANCELLED and COMPLETED records stay as history.
    Ratings live on the record itself: each party fills only its own slot
    (provider_rating is the provider's rating *of the requester*).
    """

    __tablename__ = 'exchanges'

    id = db.Column(db.Integer, primary_key=True)
    status = db.Column(db.String(20), default=ExchangeStatus.REQUESTED, nullable=False, index=True)

    provider_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    requester_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    # Cleared (SET NULL) when a service with only finished exchanges is deleted
    provider_service_id = db.Column(db.Integer, db.ForeignKey('services.id', ondelete='SET NULL'), nullable=True, index=True)
    requester_service_id = db.Column(db.Integer, db.ForeignKey('services.id', ondelete='SET NULL'), nullable=True)

    requested_date = db.Column(db.DateTime, nullable=True)
    scheduled_date = db.Column(db.DateTime, nullable=True, index=True)
    completed_date = db.Column(db.DateTime, nullable=True)
    hours = db.Column(db.Float, nullable=True)

    provider_rating = db.Column(db.Integer, nullable=True)
    requester_rating = db.Column(db.Integer, nullable=True)
    provider_review = db.Column(db.Text, nullable=True)
    requester_review = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        db.CheckConstraint('provider_id <> requester_id', name='exchange_distinct_parties'),
        db.CheckConstraint('hours IS NULL OR hours >= 0.5', name='exchange_min_hours'),
        db.CheckConstraint('provider_rating IS NULL OR provider_rating BETWEEN 1 AND 5', name='exchange_provider_rating_range'),
        db.CheckConstraint('requester_rating IS NULL OR requester_rating BETWEEN 1 AND 5', name='exchange_requester_rating_range'),
    )

    # Relationships
    provider = db.relationship('User', foreign_keys=[provider_id], backref='exchanges_as_provider')
    requester = db.relationship('User', foreign_keys=[requester_id], backref='exchanges_as_requester')
    provider_service = db.relationship('Service', foreign_keys=[provider_service_id])
    requester_service = db.relationship('Service', foreign_keys=[requester_service_id])

    def is_party(self, user_id):
        return user_id in (self.provider_id, self.requester_id)

    def other_party_id(self, user_id):
        """Id of the counterpart of ``user_id`` on this exchange."""
        return self.requester_id if user_id == self.provider_id else self.provider_id

    @property
    def is_active(self):
        return self.status in ACTIVE_STATUSES

    def to_dict(self, include_relations=True):
        """Convert exchange to dictionary."""
        data = {
            'id': self.id,
            'status': self.status,
            'provider_id': self.provider_id,
            'requester_id': self.requester_id,
            'provider_service_id': self.provider_service_id,
            'requester_service_id': self.requester_service_id,
            'requested_date': utc_isoformat(self.requested_date),
            'scheduled_date': utc_isoformat(self.scheduled_date),
            'completed_date': utc_isoformat(self.completed_date),
            'hours': self.hours,
            'provider_rating': self.provider_rating,
            'requester_rating': self.requester_rating,
            'provider_review': self.provider_review,
            'requester_review': self.requester_review,
            'created_at': utc_isoformat(self.created_at),
            'updated_at': utc_isoformat(self.updated_at),
        }
        if include_relations:
            data['provider'] = user_summary(self.provider)
            data['requester'] = user_summary(self.requester)
            data['provider_service'] = _service_summary(self.provider_service)
            data['requester_service'] = _service_summary(self.requester_service)
        return data

    def __repr__(self):
        return f'<Exchange {self.id}: {self.status}>'


def _service_summary(service):
    if not service:
        return None
    return {'id': service.id, 'title': service.title}
