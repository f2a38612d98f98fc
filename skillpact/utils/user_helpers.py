"""Shared user-related helper functions."""

import logging

logger = logging.getLogger(__name__)


def get_display_name(user):
    """
    Get the best display name for a user.

    Priority:
    1. name (if available)
    2. 'Someone' (fallback)
    """
    if not user or not user.name:
        return 'Someone'
    return user.name


def user_summary(user):
    """Compact user representation embedded in exchange/rating payloads."""
    if not user:
        return None
    return {
        'id': user.id,
        'name': user.name,
        'image': user.image,
    }


def run_safe(func, *args, **kwargs):
    """
    Run a best-effort side effect, logging instead of raising on failure.

    Socket broadcasts and similar follow-ups must never fail the request
    whose primary write has already been committed.
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        logger.warning('Best-effort %s failed (non-critical): %s', getattr(func, '__name__', func), e)
        return None
