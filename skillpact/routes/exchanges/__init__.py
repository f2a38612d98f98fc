"""Exchange routes package.

This package organizes exchange-related routes into logical submodules:
- lifecycle: state transitions (request, respond, schedule, complete, cancel)
- queries: read-only views scoped to the caller (pending, upcoming, recent...)
- helpers: shared lookups, authorization and the guarded status update
"""

from flask import Blueprint

exchanges_bp = Blueprint('exchanges', __name__)

# Import helpers first (used by other modules)
from skillpact.routes.exchanges.helpers import (  # noqa: E402
    get_exchange_or_404,
    require_party,
    guarded_update,
)

# Import and register all route modules
from skillpact.routes.exchanges import lifecycle  # noqa: E402,F401
from skillpact.routes.exchanges import queries  # noqa: E402,F401
