"""Typed API errors.

Every error carries a machine-readable ``kind`` alongside the human message so
the frontend can branch on it (e.g. PRECONDITION_FAILED prompts the user to
finish their profile instead of showing a generic failure).
"""

import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors rendered as ``{'error': ..., 'code': ...}``."""

    kind = 'INTERNAL'
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self):
        return {'error': self.message, 'code': self.kind}


class BadRequest(ApiError):
    kind = 'BAD_REQUEST'
    status_code = 400


class Unauthorized(ApiError):
    kind = 'UNAUTHORIZED'
    status_code = 401


class Forbidden(ApiError):
    kind = 'FORBIDDEN'
    status_code = 403


class NotFound(ApiError):
    kind = 'NOT_FOUND'
    status_code = 404


class Conflict(ApiError):
    kind = 'CONFLICT'
    status_code = 409


class PreconditionFailed(ApiError):
    kind = 'PRECONDITION_FAILED'
    status_code = 412


class InternalError(ApiError):
    kind = 'INTERNAL'
    status_code = 500


def register_error_handlers(app, db):
    """Render ApiError and unexpected database failures as JSON."""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        # Nothing half-validated may be flushed by a later request on this session
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.error('Database error: %s', error, exc_info=True)
        return jsonify(InternalError('Unexpected database error').to_dict()), 500

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify(NotFound('Resource not found').to_dict()), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'error': 'Method not allowed', 'code': 'BAD_REQUEST'}), 405
