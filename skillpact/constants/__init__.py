"""Shared constants for the application."""

from skillpact.constants.categories import DEFAULT_CATEGORIES, seed_categories

__all__ = [
    'DEFAULT_CATEGORIES',
    'seed_categories',
]
