import logging
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import AuthBase, Base

logger = logging.getLogger(__name__)


def _create_tables(metadata, engine: Engine, label: str) -> None:
    try:
        for table in metadata.sorted_tables:
            table.create(engine, checkfirst=True)
            logger.info(f"Table {table.name} ready")
        logger.info(f"{label} tables created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error creating {label} tables: {e}")
        raise


def init_db(engine: Engine) -> None:
    """Create the people, cars and stores tables if they do not exist yet."""
    # Registers the models on Base.metadata
    import app.models.registry  # noqa: F401
    _create_tables(Base.metadata, engine, "registry")


def init_auth_db(engine: Engine) -> None:
    """Create the users table for the auth store."""
    import app.models.user  # noqa: F401
    _create_tables(AuthBase.metadata, engine, "auth")
