#!/usr/bin/env python
"""Database initialization script for the Skillpact backend.

Creates every table from the SQLAlchemy models and seeds the default
service categories. Safe to run more than once.

Usage:
    python init_db.py
"""

import logging
import os
import sys

from skillpact import create_app, db
from skillpact.constants import seed_categories

logger = logging.getLogger('init_db')


def init_database():
    """Create all tables and the default categories."""
    config_name = os.getenv('FLASK_ENV', 'development')
    app = create_app(config_name)

    with app.app_context():
        try:
            logger.info('Creating tables on %s', app.config['SQLALCHEMY_DATABASE_URI'])
            db.create_all()

            created = seed_categories(db.session)
            logger.info('Seeded %s service categories', created)

            for table_name in db.metadata.sorted_tables:
                logger.info('  %s', table_name)

            return True

        except Exception as e:
            db.session.rollback()
            logger.error('Error creating database: %s', e, exc_info=True)
            return False


if __name__ == '__main__':
    success = init_database()
    sys.exit(0 if success else 1)
