"""Shared utilities for the Skillpact backend.

This package contains reusable utilities that are shared across
multiple route files to reduce code duplication.
"""

from skillpact.utils.auth import token_required, token_optional
from skillpact.utils.user_helpers import get_display_name, user_summary, run_safe

__all__ = [
    'token_required',
    'token_optional',
    'get_display_name',
    'user_summary',
    'run_safe',
]
