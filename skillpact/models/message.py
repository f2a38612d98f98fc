"""Chat message scoped to one exchange."""

from datetime import datetime
from skillpact import db
from skillpact.utils.dates import utc_isoformat

MAX_MESSAGE_LENGTH = 5000


class Message(db.Model):
    """Append-only chat log entry between the two parties of an exchange."""

    __tablename__ = 'messages'

    id = db.Column(db.Integer, primary_key=True)
    exchange_id = db.Column(db.Integer, db.ForeignKey('exchanges.id'), nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    sender = db.relationship('User', backref='sent_messages')
    exchange = db.relationship('Exchange', backref=db.backref('messages', lazy='dynamic'))

    def to_dict(self):
        """Convert message to dictionary."""
        sender_data = None
        if self.sender:
            sender_data = {
                'id': self.sender.id,
                'name': self.sender.name,
                'image': self.sender.image,
            }

        return {
            'id': self.id,
            'exchange_id': self.exchange_id,
            'sender_id': self.sender_id,
            'sender': sender_data,
            'content': self.content,
            'created_at': utc_isoformat(self.created_at)
        }

    def __repr__(self):
        return f'<Message {self.id} in Exchange {self.exchange_id}>'
