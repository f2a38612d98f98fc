"""Cache-invalidation contract between mutations and client queries.

Every mutating procedure returns ``invalidates``: the names of the read
queries whose cached results it may have changed. Clients refetch exactly
that set instead of refreshing everything.
"""

EXCHANGE_DETAIL = 'exchanges.detail'
EXCHANGE_LIST = 'exchanges.list'
EXCHANGE_PENDING = 'exchanges.pending'
EXCHANGE_UPCOMING = 'exchanges.upcoming'
EXCHANGE_RECENT = 'exchanges.recent'
EXCHANGE_ACTIVE_SUMMARY = 'exchanges.active_summary'
RATINGS_RECEIVED = 'ratings.received'
RATINGS_GIVEN = 'ratings.given'
USER_REVIEWS = 'ratings.user_reviews'
NOTIFICATIONS_LIST = 'notifications.list'
NOTIFICATIONS_UNREAD = 'notifications.unread_count'
MESSAGES_LIST = 'messages.list'
SERVICES_MINE = 'services.mine'
SERVICES_DETAIL = 'services.detail'
SERVICES_BROWSE = 'services.browse'
SERVICES_NEARBY = 'services.nearby'
LOCATION_MINE = 'locations.mine'
PROFILE = 'users.profile'
PROFILE_COMPLETION = 'users.profile_completion'
DASHBOARD_STATS = 'users.dashboard_stats'

_EXCHANGE_STATE = [EXCHANGE_DETAIL, EXCHANGE_LIST, EXCHANGE_PENDING, EXCHANGE_UPCOMING,
                   EXCHANGE_ACTIVE_SUMMARY, NOTIFICATIONS_LIST, NOTIFICATIONS_UNREAD]

INVALIDATES = {
    'request_exchange': [EXCHANGE_LIST, EXCHANGE_PENDING, EXCHANGE_ACTIVE_SUMMARY,
                         NOTIFICATIONS_LIST, NOTIFICATIONS_UNREAD],
    'respond_to_request': _EXCHANGE_STATE + [EXCHANGE_RECENT],
    'schedule_exchange': list(_EXCHANGE_STATE),
    'complete_exchange': _EXCHANGE_STATE + [EXCHANGE_RECENT, DASHBOARD_STATS],
    'cancel_exchange': _EXCHANGE_STATE + [EXCHANGE_RECENT],
    'create_rating': [EXCHANGE_DETAIL, RATINGS_GIVEN, RATINGS_RECEIVED, USER_REVIEWS,
                      PROFILE, NOTIFICATIONS_LIST, NOTIFICATIONS_UNREAD],
    'mark_notifications_read': [NOTIFICATIONS_LIST, NOTIFICATIONS_UNREAD, DASHBOARD_STATS],
    'send_message': [MESSAGES_LIST],
    'create_service': [SERVICES_MINE, SERVICES_BROWSE, SERVICES_NEARBY, PROFILE, PROFILE_COMPLETION],
    'update_service': [SERVICES_MINE, SERVICES_DETAIL, SERVICES_BROWSE, SERVICES_NEARBY],
    'delete_service': [SERVICES_MINE, SERVICES_DETAIL, SERVICES_BROWSE, SERVICES_NEARBY,
                       PROFILE, PROFILE_COMPLETION],
    'set_location': [LOCATION_MINE, SERVICES_NEARBY, PROFILE, PROFILE_COMPLETION],
    'update_profile': [PROFILE, PROFILE_COMPLETION, LOCATION_MINE, SERVICES_NEARBY],
}


def invalidates(mutation):
    """Query names a mutation invalidates (a fresh list each call)."""
    return list(INVALIDATES[mutation])
