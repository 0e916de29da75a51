"""Database helpers: bounded connection retry, schema creation and guarded commits."""

import time
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from truckqr import db
from truckqr.utils.error_handler import StorageError
from truckqr.utils.logging_config import get_logger

logger = get_logger(__name__)


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    if type(dbapi_connection).__module__.startswith('sqlite3'):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def wait_for_database(max_retries=10, delay=2.0):
    """Ping the database until it answers. Returns False if it never does.

    The application keeps starting either way; requests that touch the store
    will fail individually until the database comes back.
    """
    for attempt in range(1, max_retries + 1):
        try:
            db.session.execute(text('SELECT 1'))
            db.session.remove()
            logger.info('Database connection OK')
            return True
        except SQLAlchemyError as e:
            db.session.remove()
            logger.warning(f'Database retry {attempt}/{max_retries}: {e}')
            if attempt < max_retries:
                time.sleep(delay)
    logger.warning('Database unavailable, starting in degraded mode')
    return False


def commit_changes(action='save changes'):
    """Commit the session, turning database failures into StorageError.

    The session is rolled back first so the next request starts clean.
    """
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f'Could not {action}: {e}', exc_info=True)
        raise StorageError(f'Could not {action}') from e


def ensure_schema():
    """Create missing tables. Existing tables are left untouched."""
    from truckqr import models  # noqa: F401  registers the tables
    try:
        db.create_all()
        logger.info('Schema OK')
    except SQLAlchemyError as e:
        logger.error(f'Schema creation failed: {e}', exc_info=True)
