# app/services/settings_store.py
"""
Vacation settings registry.

Holds the current VacationSettingsSnapshot for the process. Readers get a
frozen snapshot; update_settings() and reset_settings() are the only writers
and swap the whole snapshot under a lock, so no reader sees a partial update.
"""

import threading
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import PersistenceError, ValidationError
from app.models.vacation_settings import VacationSettingsRecord
from app.services.quota_resolver import validate_settings
from app.services.snapshots import VacationSettingsSnapshot
from app.utils.logger import get_logger

logger = get_logger(__name__)

_lock = threading.Lock()
_current: Optional[VacationSettingsSnapshot] = None


def _load_record(db: Session) -> Optional[VacationSettingsRecord]:
    return db.query(VacationSettingsRecord).order_by(VacationSettingsRecord.id).first()


def _write(db: Session, snapshot: VacationSettingsSnapshot, operation: str) -> VacationSettingsSnapshot:
    """Persist snapshot with the next version number and return what was stored."""
    record = _load_record(db)
    next_version = (record.version if record else 0) + 1
    values = snapshot.to_dict()
    values["version"] = next_version
    values["updated_at"] = datetime.utcnow()
    if record is None:
        record = VacationSettingsRecord(**values)
        db.add(record)
    else:
        for key, value in values.items():
            setattr(record, key, value)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[VACATION] Settings {operation} failed: {e}")
        raise PersistenceError(f"settings {operation}") from e
    return VacationSettingsSnapshot.from_record(record)


def get_settings(db: Session) -> VacationSettingsSnapshot:
    """Current settings; loaded from the store on first use, defaults if none are stored."""
    global _current
    snapshot = _current
    if snapshot is not None:
        return snapshot
    with _lock:
        if _current is None:
            record = _load_record(db)
            _current = VacationSettingsSnapshot.from_record(record) if record else VacationSettingsSnapshot.defaults()
            logger.info(f"[VACATION] Settings loaded (version {_current.version})")
        return _current


def update_settings(db: Session, payload: dict) -> VacationSettingsSnapshot:
    """
    Validate and persist a full settings payload, bump the version and
    publish it. Raises ValidationError listing every problem found.
    """
    global _current
    candidate = VacationSettingsSnapshot.create(**{k: v for k, v in payload.items() if k != "version"})
    errors, warnings = validate_settings(candidate)
    if errors:
        raise ValidationError("; ".join(errors), field="settings")
    for warning in warnings:
        logger.warning(f"[VACATION] Settings warning: {warning}")

    with _lock:
        _current = _write(db, candidate, "update")
        logger.info(f"[VACATION] Settings updated to version {_current.version}")
        return _current


def reset_settings(db: Session) -> VacationSettingsSnapshot:
    global _current
    with _lock:
        _current = _write(db, VacationSettingsSnapshot.defaults(), "reset")
        logger.info(f"[VACATION] Settings reset to defaults (version {_current.version})")
        return _current


def clear_cache():
    """Forget the published snapshot; the next get_settings() reloads from the store."""
    global _current
    with _lock:
        _current = None
