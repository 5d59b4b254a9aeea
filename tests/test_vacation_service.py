"""Store-backed tests for the vacation write paths and the settings registry."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date
from app.exceptions import NotFoundError, QuotaExceeded, ValidationError
from app.models.vacation_request import VacationRequest
from app.services import settings_store
from app.services.snapshots import VacationRecord, VacationSettingsSnapshot
from app.services.vacation_service import (
    bulk_set_team_status, daily_summary, delete_driver_day_off, monthly_stats, requests_between,
    set_work_status, submit_driver_day_off,
)
from conftest import add_driver

TODAY = date(2025, 6, 1)
JUNE_MONDAY = date(2025, 6, 16)


def configure(db, **kwargs):
    payload = VacationSettingsSnapshot.defaults().to_dict()
    payload.update(kwargs)
    return settings_store.update_settings(db, payload)


def make_team(db, team="team-a", count=3, prefix="D"):
    return [add_driver(db, name=f"{team}-{i}", employee_id=f"{prefix}{team}{i}", team=team) for i in range(count)]


class TestDriverSelfService:
    def test_submit_day_off(self, db):
        driver = add_driver(db)
        request = submit_driver_day_off(db, driver, JUNE_MONDAY, TODAY)
        assert request.work_status == "day_off"
        assert request.is_off is True
        assert request.team == "team-a"

    def test_lead_time_enforced(self, db):
        driver = add_driver(db)
        with pytest.raises(ValidationError):
            submit_driver_day_off(db, driver, date(2025, 6, 10), TODAY)
        submit_driver_day_off(db, driver, date(2025, 6, 11), TODAY)

    def test_quota_rejects_third_request_on_june_monday(self, db):
        configure(db, team_monthly_weekday_limits={"team-a": {"6": {"1": 2}}})
        a, b, c = make_team(db)
        submit_driver_day_off(db, a, JUNE_MONDAY, TODAY)
        submit_driver_day_off(db, b, JUNE_MONDAY, TODAY)
        with pytest.raises(QuotaExceeded) as exc:
            submit_driver_day_off(db, c, JUNE_MONDAY, TODAY)
        assert (exc.value.limit, exc.value.existing) == (2, 2)
        assert db.query(VacationRequest).count() == 2

    def test_resubmitting_same_day_is_an_upsert(self, db):
        configure(db, max_drivers_off_per_day={"team-a": 1})
        driver = add_driver(db)
        submit_driver_day_off(db, driver, JUNE_MONDAY, TODAY)
        submit_driver_day_off(db, driver, JUNE_MONDAY, TODAY, reason="family")
        rows = db.query(VacationRequest).all()
        assert len(rows) == 1
        assert rows[0].reason == "family"

    def test_zero_limit_rejects_external_driver_too(self, db):
        configure(db, specific_date_limits={"2025-06-16": {"team-a": 0}})
        external = add_driver(db, name="Ext", employee_id="E100")
        with pytest.raises(QuotaExceeded):
            submit_driver_day_off(db, external, JUNE_MONDAY, TODAY)

    def test_external_driver_exempt_from_count(self, db):
        configure(db, max_drivers_off_per_day={"team-a": 1})
        internal = add_driver(db)
        external = add_driver(db, name="Ext", employee_id="E100")
        submit_driver_day_off(db, internal, JUNE_MONDAY, TODAY)
        request = submit_driver_day_off(db, external, JUNE_MONDAY, TODAY)
        assert request.is_external_driver is True

    def test_delete_day_off(self, db):
        driver = add_driver(db)
        submit_driver_day_off(db, driver, JUNE_MONDAY, TODAY)
        delete_driver_day_off(db, driver, JUNE_MONDAY, TODAY)
        assert db.query(VacationRequest).count() == 0

    def test_delete_missing_day_off(self, db):
        with pytest.raises(NotFoundError):
            delete_driver_day_off(db, add_driver(db), JUNE_MONDAY, TODAY)

    def test_delete_inside_lead_time_rejected(self, db):
        driver = add_driver(db)
        submit_driver_day_off(db, driver, JUNE_MONDAY, TODAY)
        with pytest.raises(ValidationError):
            delete_driver_day_off(db, driver, JUNE_MONDAY, date(2025, 6, 10))


class TestAdmin:
    def test_any_status_without_lead_time(self, db):
        driver = add_driver(db)
        request = set_work_status(db, driver, TODAY, "night_shift")
        assert request.work_status == "night_shift"
        assert request.is_off is False

    def test_unknown_status_rejected(self, db):
        with pytest.raises(ValidationError):
            set_work_status(db, add_driver(db), TODAY, "holiday")

    def test_admin_day_off_is_quota_checked(self, db):
        configure(db, specific_date_limits={"2025-06-16": {"team-a": 0}})
        with pytest.raises(QuotaExceeded):
            set_work_status(db, add_driver(db), JUNE_MONDAY, "day_off")

    def test_bulk_within_quota(self, db):
        configure(db, max_drivers_off_per_day={"team-a": 3})
        written = bulk_set_team_status(db, make_team(db), JUNE_MONDAY, "day_off")
        assert len(written) == 3

    def test_bulk_is_all_or_nothing(self, db):
        configure(db, max_drivers_off_per_day={"team-a": 2, "team-b": 1})
        drivers = make_team(db, "team-a", 2) + make_team(db, "team-b", 2)
        with pytest.raises(QuotaExceeded) as exc:
            bulk_set_team_status(db, drivers, JUNE_MONDAY, "day_off")
        assert exc.value.team == "team-b"
        assert db.query(VacationRequest).count() == 0

    def test_bulk_respects_specific_date_override(self, db):
        configure(db, max_drivers_off_per_day={"team-a": 5}, specific_date_limits={"2025-06-16": {"team-a": 1}})
        with pytest.raises(QuotaExceeded):
            bulk_set_team_status(db, make_team(db, count=2), JUNE_MONDAY, "day_off")

    def test_bulk_working_skips_quota(self, db):
        configure(db, specific_date_limits={"2025-06-16": {"team-a": 0}})
        assert len(bulk_set_team_status(db, make_team(db), JUNE_MONDAY, "working")) == 3


class TestStats:
    def test_monthly_stats(self, db):
        driver = add_driver(db)
        for day in (2, 3, 4):
            set_work_status(db, driver, date(2025, 6, day), "day_off")
        set_work_status(db, driver, date(2025, 6, 5), "night_shift")
        records = requests_between(db, date(2025, 6, 1), date(2025, 6, 30), driver_id=driver.id)
        stats = monthly_stats(driver.id, 2025, 6, records, settings_store.get_settings(db))
        assert stats.total_off_days == 3
        assert stats.required_minimum == 9
        assert stats.remaining_required == 6
        assert stats.maximum_allowed == 12

    def test_daily_summary_splits_external(self):
        records = [
            VacationRecord(driver_id=1, date=JUNE_MONDAY, work_status="day_off", team="A", is_off=True),
            VacationRecord(driver_id=2, date=JUNE_MONDAY, work_status="day_off", team="A", is_off=True,
                           is_external_driver=True),
            VacationRecord(driver_id=3, date=JUNE_MONDAY, work_status="working", team="B"),
        ]
        assert daily_summary(JUNE_MONDAY, records) == {"A": {"internal": 1, "external": 1}}


class TestSettingsStore:
    def test_defaults_when_nothing_stored(self, db):
        current = settings_store.get_settings(db)
        assert current.version == 0
        assert current.max_drivers_off_per_day["distribution-center"] == 2

    def test_update_bumps_version_and_publishes(self, db):
        first = configure(db, global_max_drivers_off_per_day=4)
        second = configure(db, global_max_drivers_off_per_day=5)
        assert (first.version, second.version) == (1, 2)
        assert settings_store.get_settings(db) is second

    def test_update_survives_reload(self, db):
        configure(db, specific_date_limits={"2025-06-16": {"A": 0}})
        settings_store.clear_cache()
        assert settings_store.get_settings(db).specific_date_limits["2025-06-16"]["A"] == 0

    def test_invalid_update_rejected_and_not_published(self, db):
        before = settings_store.get_settings(db)
        with pytest.raises(ValidationError):
            configure(db, max_drivers_off_per_day={"A": -1})
        assert settings_store.get_settings(db) is before

    def test_reset(self, db):
        configure(db, global_max_drivers_off_per_day=9)
        reset = settings_store.reset_settings(db)
        assert reset.global_max_drivers_off_per_day == 3
        assert reset.version == 2
