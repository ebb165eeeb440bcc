import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from backoffice.core.config import settings
from backoffice.core.exceptions import StorageError

logger = logging.getLogger(__name__)

# Support both PostgreSQL and SQLite via centralized settings
DATABASE_URL = settings.database_url

if DATABASE_URL.startswith("postgresql"):
    engine = create_engine(DATABASE_URL)
else:
    # SQLite configuration for local development/testing
    engine = create_engine(
        DATABASE_URL, connect_args={"check_same_thread": False}
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the Service Layer.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a block as one unit of work: commit on success, roll back on any failure.

    Driver/ORM failures are surfaced as StorageError; application errors
    (ConflictError, validation) are re-raised untouched after the rollback.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Unit of work rolled back on storage failure: {e}")
        raise StorageError(details={"reason": e.__class__.__name__}) from e
    except Exception:
        db.rollback()
        raise

# SQLSTATE raised when statement_timeout cancels a query
QUERY_CANCELED = "57014"

def is_query_canceled(error: Optional[BaseException]) -> bool:
    if not isinstance(error, OperationalError):
        return False
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    code = getattr(error.orig, "pgcode", None) or getattr(error.orig, "sqlstate", None)
    return code == QUERY_CANCELED

def init_db():
    """
    Registers all domain models and initializes the database schema.
    This should be called during the application startup lifespan.
    """
    # Import all models to ensure they are registered with Base.metadata before create_all
    from backoffice.models import (  # noqa: F401
        branch, user, employee, transaction, adjustment, salary_payment, audit_log
    )
    Base.metadata.create_all(bind=engine)
