"""Database models for the Skillpact application."""

from .user import User, Skill
from .location import Location
from .service import Service, ServiceCategory, LocationType
from .exchange import Exchange, ExchangeStatus, ACTIVE_STATUSES, TERMINAL_STATUSES
from .notification import Notification, NotificationType
from .message import Message

__all__ = [
    'User',
    'Skill',
    'Location',
    'Service',
    'ServiceCategory',
    'LocationType',
    'Exchange',
    'ExchangeStatus',
    'ACTIVE_STATUSES',
    'TERMINAL_STATUSES',
    'Notification',
    'NotificationType',
    'Message',
]
