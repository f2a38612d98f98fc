"""Routes package for the Skillpact application."""


def register_routes(app):
    """Register all route blueprints with the application."""
    from .exchanges import exchanges_bp
    from .ratings import ratings_bp
    from .services import services_bp
    from .locations import locations_bp
    from .users import users_bp
    from .notifications import notifications_bp
    from .messages import messages_bp

    app.register_blueprint(exchanges_bp, url_prefix='/api/exchanges')
    app.register_blueprint(ratings_bp, url_prefix='/api/ratings')
    app.register_blueprint(services_bp, url_prefix='/api/services')
    app.register_blueprint(locations_bp, url_prefix='/api/locations')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
    app.register_blueprint(messages_bp, url_prefix='/api/messages')
