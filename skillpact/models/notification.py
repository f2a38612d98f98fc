"""Notification model for user notifications."""

from skillpact import db
from datetime import datetime
from skillpact.utils.dates import utc_isoformat


class Notification(db.Model):
    """Append-only notification produced by exchange transitions and chat."""

    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    type = db.Column(db.String(50), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)

    # Related exchange (for navigation)
    exchange_id = db.Column(db.Integer, db.ForeignKey('exchanges.id'), nullable=True, index=True)

    # Status
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    read_at = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    recipient = db.relationship('User', foreign_keys=[recipient_id], backref=db.backref('notifications', lazy='dynamic'))
    sender = db.relationship('User', foreign_keys=[sender_id])

    def __repr__(self):
        return f'<Notification {self.id} for User {self.recipient_id}: {self.type}>'

    def to_dict(self):
        """Convert notification to dictionary."""
        return {
            'id': self.id,
            'recipient_id': self.recipient_id,
            'sender_id': self.sender_id,
            'type': self.type,
            'title': self.title,
            'message': self.message,
            'exchange_id': self.exchange_id,
            'is_read': self.is_read,
            'read_at': utc_isoformat(self.read_at),
            'created_at': utc_isoformat(self.created_at),
        }

    def mark_as_read(self):
        """Mark notification as read."""
        self.is_read = True
        self.read_at = datetime.utcnow()


# Notification type constants
class NotificationType:
    EXCHANGE_REQUEST = 'EXCHANGE_REQUEST'
    EXCHANGE_ACCEPTED = 'EXCHANGE_ACCEPTED'
    EXCHANGE_DECLINED = 'EXCHANGE_DECLINED'
    EXCHANGE_SCHEDULED = 'EXCHANGE_SCHEDULED'
    EXCHANGE_COMPLETED = 'EXCHANGE_COMPLETED'
    EXCHANGE_CANCELLED = 'EXCHANGE_CANCELLED'
    NEW_RATING = 'NEW_RATING'
    MESSAGE = 'MESSAGE'
