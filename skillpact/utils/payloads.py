"""Request payload helpers.

Procedures receive JSON bodies with optional members; these helpers pull typed
values out of them and raise BadRequest with a readable message otherwise.
"""

import math

from flask import request

from skillpact.errors import BadRequest
from skillpact.utils.dates import parse_datetime

_MISSING = object()


def get_json_body():
    """Return the request JSON object, or an empty dict for an empty body."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')
    return data


def get_int(data, key, required=False, default=None):
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        if required:
            raise BadRequest(f'{key} is required')
        return default
    if isinstance(value, bool):
        raise BadRequest(f'{key} must be an integer')
    if isinstance(value, float) and not value.is_integer():
        raise BadRequest(f'{key} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f'{key} must be an integer')


def get_number(data, key, required=False, minimum=None, maximum=None):
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        if required:
            raise BadRequest(f'{key} is required')
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise BadRequest(f'{key} must be a number')
    if isinstance(value, float) and not math.isfinite(value):
        raise BadRequest(f'{key} must be a finite number')
    if minimum is not None and value < minimum:
        raise BadRequest(f'{key} must be at least {minimum}')
    if maximum is not None and value > maximum:
        raise BadRequest(f'{key} must be at most {maximum}')
    return float(value)


def get_string(data, key, required=False, max_length=None, min_length=None):
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        if required:
            raise BadRequest(f'{key} is required')
        return None
    if not isinstance(value, str):
        raise BadRequest(f'{key} must be a string')
    value = value.strip()
    if required and not value:
        raise BadRequest(f'{key} is required')
    if min_length is not None and len(value) < min_length:
        raise BadRequest(f'{key} must be at least {min_length} characters')
    if max_length is not None and len(value) > max_length:
        raise BadRequest(f'{key} must be at most {max_length} characters')
    return value


def get_bool(data, key, required=False, default=None):
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        if required:
            raise BadRequest(f'{key} is required')
        return default
    if not isinstance(value, bool):
        raise BadRequest(f'{key} must be true or false')
    return value


def get_datetime(data, key, required=False):
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None or value == '':
        if required:
            raise BadRequest(f'{key} is required')
        return None
    try:
        return parse_datetime(value)
    except (TypeError, ValueError):
        raise BadRequest(f'{key} must be an ISO-8601 date')
