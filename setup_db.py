"""
Setup script for creating the registry and user tables.
Creates the people, cars and stores tables in the main database and the
users table in the auth database; existing tables are left alone.
"""

import logging

from app.core.config import settings
from app.db.init_db import init_auth_db, init_db
from app.db.session import create_db_engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def setup_database():
    """Initialize database tables for both stores."""
    logger.info("Creating registry and user tables...")
    try:
        init_db(create_db_engine(settings.SQLALCHEMY_DATABASE_URI))
        init_auth_db(create_db_engine(settings.AUTH_DATABASE_URL))
        logger.info("Database tables created successfully!")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise

if __name__ == "__main__":
    setup_database()
