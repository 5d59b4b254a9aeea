# app/routers/vacation.py
"""
Vacation — daily limits, driver self-service day-offs, admin work-status
updates (single and bulk), monthly stats and the quota settings.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from app.database import get_db, get_or_raise
from app.exceptions import ValidationError
from app.models.driver import Driver
from app.schemas.vacation import (
    BulkWorkStatusUpdate, DriverDayOffRequest, LimitOut, MonthlyStatsOut,
    VacationRequestOut, VacationSettingsIn, VacationSettingsOut, WorkStatusUpdate,
)
from app.services import settings_store
from app.services.quota_resolver import limit_rule_for
from app.services.vacation_service import (
    bulk_set_team_status, daily_summary, delete_driver_day_off, monthly_stats,
    requests_between, set_work_status, submit_driver_day_off,
)
from app.utils.dates import month_bounds

router = APIRouter()


@router.get("/vacation/limit", response_model=LimitOut, summary="Day-off limit for a team on a day")
def get_limit(day: date = Query(..., alias="date"), team: str = Query(...), db: Session = Depends(get_db)):
    result = limit_rule_for(day, team, settings_store.get_settings(db))
    return LimitOut(date=day, team=team, limit=result.limit, rule=result.rule, detail=result.detail)


@router.get("/vacation/summary", summary="Day-off counts per team on a day")
def get_daily_summary(day: date = Query(..., alias="date"), db: Session = Depends(get_db)):
    return {"date": day, "teams": daily_summary(day, requests_between(db, day, day))}


# ── Driver self-service ──────────────────────────────────────────────────────

@router.post("/vacation/requests/driver", response_model=VacationRequestOut, summary="Driver requests a day off")
def driver_request_day_off(body: DriverDayOffRequest, db: Session = Depends(get_db)):
    driver = get_or_raise(db, Driver, body.driver_id, "Driver")
    return submit_driver_day_off(db, driver, body.date, date.today(), body.reason)


@router.delete("/vacation/requests/driver", summary="Driver withdraws a day off")
def driver_delete_day_off(driver_id: int, day: date = Query(..., alias="date"), db: Session = Depends(get_db)):
    driver = get_or_raise(db, Driver, driver_id, "Driver")
    delete_driver_day_off(db, driver, day, date.today())
    return {"status": "deleted", "driver_id": driver_id, "date": day}


# ── Admin ────────────────────────────────────────────────────────────────────

@router.put("/vacation/requests", response_model=VacationRequestOut, summary="Set a driver's work status for a day")
def admin_set_status(body: WorkStatusUpdate, db: Session = Depends(get_db)):
    driver = get_or_raise(db, Driver, body.driver_id, "Driver")
    return set_work_status(db, driver, body.date, body.work_status, body.reason)


@router.post("/vacation/requests/bulk", response_model=list[VacationRequestOut],
             summary="Set one work status for a team or a selection of drivers")
def admin_bulk_status(body: BulkWorkStatusUpdate, db: Session = Depends(get_db)):
    """All affected teams are quota-checked first; nothing is written if any team fails."""
    if body.driver_ids:
        drivers = [get_or_raise(db, Driver, driver_id, "Driver") for driver_id in body.driver_ids]
    elif body.team:
        drivers = db.query(Driver).filter(Driver.team == body.team).order_by(Driver.id).all()
    else:
        raise ValidationError("Give team or driver_ids", field="driver_ids")
    return bulk_set_team_status(db, drivers, body.date, body.work_status)


@router.get("/vacation/stats/{driver_id}", response_model=MonthlyStatsOut, summary="Monthly day-off stats")
def driver_stats(driver_id: int, year: int = Query(..., ge=2000, le=2100), month: int = Query(..., ge=1, le=12),
                 db: Session = Depends(get_db)):
    get_or_raise(db, Driver, driver_id, "Driver")
    first, last = month_bounds(year, month)
    requests = requests_between(db, first, last, driver_id=driver_id)
    return monthly_stats(driver_id, year, month, requests, settings_store.get_settings(db))


# ── Settings ─────────────────────────────────────────────────────────────────

@router.get("/vacation/settings", response_model=VacationSettingsOut, summary="Current quota settings")
def get_vacation_settings(db: Session = Depends(get_db)):
    return settings_store.get_settings(db).to_dict()


@router.put("/vacation/settings", response_model=VacationSettingsOut, summary="Replace quota settings")
def put_vacation_settings(body: VacationSettingsIn, db: Session = Depends(get_db)):
    return settings_store.update_settings(db, body.model_dump()).to_dict()


@router.post("/vacation/settings/reset", response_model=VacationSettingsOut, summary="Restore default settings")
def reset_vacation_settings(db: Session = Depends(get_db)):
    return settings_store.reset_settings(db).to_dict()
