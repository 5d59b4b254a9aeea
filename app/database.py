# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite accepted for local runs and tests).
All models are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings
from app.exceptions import NotFoundError, PersistenceError

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

_engine_kwargs: dict = {"echo": False}   # Set echo=True to log all SQL queries (debug only)
if _is_sqlite:
    _engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    _engine_kwargs.update({
        "pool_pre_ping": True,   # Auto-reconnect if DB connection drops
        "pool_size": 10,
        "max_overflow": 20,
    })

engine = create_engine(settings.DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def import_models():
    """Import every model so Base.metadata knows about all tables."""
    from app.models.vehicle import Vehicle                                      # noqa
    from app.models.driver import Driver                                        # noqa
    from app.models.vacation_request import VacationRequest                     # noqa
    from app.models.vacation_settings import VacationSettingsRecord             # noqa
    from app.models.inoperative_period import VehicleInoperativePeriod          # noqa
    from app.models.inspection_booking import InspectionBooking                 # noqa
    from app.models.temporary_assignment import TemporaryAssignment             # noqa
    from app.models.assignment_change import VehicleAssignmentChange            # noqa
    from app.models.notification import Notification                            # noqa


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    """
    import_models()
    Base.metadata.create_all(bind=bind or engine)


def get_or_raise(db, model, record_id, resource: str):
    """Fetch a row by primary key or raise NotFoundError."""
    record = db.get(model, record_id)
    if record is None:
        raise NotFoundError(resource, record_id)
    return record


def commit_or_raise(db, operation: str):
    """Commit; on failure roll back and raise PersistenceError."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(operation) from e
