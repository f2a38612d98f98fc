import logging
import os

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate
from flask_restx import Api, Resource
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO()

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    from skillpact.config import config_by_name
    from skillpact.errors import register_error_handlers

    config_name = config_name or os.getenv('FLASK_ENV', 'development')
    app = Flask(__name__)
    app.config.from_object(config_by_name.get(config_name, config_by_name['development']))

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    CORS(app, origins=app.config['CORS_ORIGINS'])
    socketio.init_app(
        app,
        cors_allowed_origins=app.config['CORS_ORIGINS'],
        message_queue=app.config['REDIS_URL']
    )

    register_error_handlers(app, db)

    # API docs live under /api/docs so the root path stays free
    api = Api(app, version='1.0', title='Skillpact API', doc='/api/docs')

    @api.route('/api/health', endpoint='api_health')
    class Health(Resource):
        def get(self):
            return {'status': 'ok'}

    from skillpact.routes import register_routes
    register_routes(app)

    from skillpact.socket_events import register_socket_events
    register_socket_events(socketio)

    if config_name != 'testing':
        with app.app_context():
            # Local SQLite convenience; real deployments run `flask db upgrade`
            if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
                db.create_all()

    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}, 200

    logger.info('Skillpact app created (%s)', config_name)
    return app
