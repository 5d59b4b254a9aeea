"""Store-backed tests for the expiry sweep."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date
from unittest.mock import patch
from app.models.inoperative_period import VehicleInoperativePeriod
from app.models.temporary_assignment import TemporaryAssignment
from app.services import expiry_sweep
from app.services.expiry_sweep import (
    _complete_period, _restore_assignment, run_sweep, run_sweep_locked, run_sweep_once,
)
from app.services.vehicle_driver import restore_driver
from conftest import add_driver, add_vehicle

TODAY = date(2025, 7, 10)
YESTERDAY = date(2025, 7, 9)


def add_temporary(db, vehicle, driver, start=date(2025, 7, 1), end=YESTERDAY, original="Sato"):
    assignment = TemporaryAssignment(driver_id=driver.id, driver_name=driver.name, vehicle_id=vehicle.id,
                                     start_date=start, end_date=end, original_driver_name=original)
    db.add(assignment)
    db.commit()
    return assignment


def add_period(db, vehicle, start=date(2025, 7, 1), end=YESTERDAY, status="active"):
    period = VehicleInoperativePeriod(vehicle_id=vehicle.id, start_date=start, end_date=end,
                                      period_type="repair", status=status)
    db.add(period)
    db.commit()
    return period


class TestTemporaryAssignments:
    def test_expired_assignment_restores_original_driver(self, db):
        vehicle = add_vehicle(db, driver="Tanaka")
        temp_driver = add_driver(db, name="Tanaka", employee_id="D900")
        assignment = add_temporary(db, vehicle, temp_driver)

        report = run_sweep(db, TODAY)

        assert report.assignments_restored == [assignment.id]
        assert vehicle.driver == "Sato"
        assert db.query(TemporaryAssignment).count() == 0

    def test_empty_original_leaves_vehicle_unassigned(self, db):
        vehicle = add_vehicle(db, driver="Tanaka")
        add_temporary(db, vehicle, add_driver(db, name="Tanaka", employee_id="D900"), original=None)

        run_sweep(db, TODAY)

        assert vehicle.driver is None

    def test_assignment_ending_today_is_kept(self, db):
        vehicle = add_vehicle(db, driver="Tanaka")
        add_temporary(db, vehicle, add_driver(db, name="Tanaka", employee_id="D900"), end=TODAY)

        report = run_sweep(db, TODAY)

        assert report.assignments_restored == []
        assert vehicle.driver == "Tanaka"

    def test_second_restore_of_same_record_is_a_no_op(self, db):
        vehicle = add_vehicle(db, driver="Tanaka")
        assignment = add_temporary(db, vehicle, add_driver(db, name="Tanaka", employee_id="D900"))
        assert _restore_assignment(db, assignment.id, vehicle.id, "Sato") is True
        assert _restore_assignment(db, assignment.id, vehicle.id, "Sato") is False


class TestInoperativePeriods:
    def test_expired_period_completed_and_vehicle_normal(self, db):
        vehicle = add_vehicle(db, status="repair")
        period = add_period(db, vehicle)

        report = run_sweep(db, TODAY)

        assert report.periods_completed == [period.id]
        assert period.status == "completed"
        assert vehicle.status == "normal"

    def test_vehicle_stays_in_repair_while_another_period_covers_today(self, db):
        vehicle = add_vehicle(db, status="repair")
        add_period(db, vehicle)
        add_period(db, vehicle, start=YESTERDAY, end=date(2025, 7, 12))

        run_sweep(db, TODAY)

        assert vehicle.status == "repair"

    def test_completed_periods_untouched(self, db):
        vehicle = add_vehicle(db)
        period = add_period(db, vehicle, status="completed")
        assert _complete_period(db, period.id, vehicle.id, TODAY) is False


class TestActivation:
    def test_assignment_starting_today_puts_its_driver_on(self, db):
        vehicle = add_vehicle(db, driver="Sato")
        assignment = add_temporary(db, vehicle, add_driver(db, name="Tanaka", employee_id="D900"),
                                   start=TODAY, end=date(2025, 7, 12))

        first = run_sweep(db, TODAY)
        second = run_sweep(db, TODAY)

        assert first.assignments_started == [assignment.id]
        assert vehicle.driver == "Tanaka"
        assert not second.changed

    def test_future_assignment_waits_for_its_start(self, db):
        vehicle = add_vehicle(db, driver="Sato")
        add_temporary(db, vehicle, add_driver(db, name="Tanaka", employee_id="D900"),
                      start=date(2025, 7, 12), end=date(2025, 7, 14))

        report = run_sweep(db, TODAY)

        assert report.assignments_started == []
        assert vehicle.driver == "Sato"

    def test_back_to_back_assignments_hand_over(self, db):
        vehicle = add_vehicle(db, driver="Tanaka")
        ended = add_temporary(db, vehicle, add_driver(db, name="Tanaka", employee_id="D900"))
        starting = add_temporary(db, vehicle, add_driver(db, name="Ito", employee_id="D901"),
                                 start=TODAY, end=TODAY)

        report = run_sweep(db, TODAY)

        assert report.assignments_restored == [ended.id]
        assert report.assignments_started == [starting.id]
        assert vehicle.driver == "Ito"

    def test_period_starting_today_puts_vehicle_in_repair(self, db):
        vehicle = add_vehicle(db)
        period = add_period(db, vehicle, start=TODAY, end=date(2025, 7, 12))

        first = run_sweep(db, TODAY)
        second = run_sweep(db, TODAY)

        assert first.periods_started == [period.id]
        assert vehicle.status == "repair"
        assert not second.changed

    def test_future_period_waits_for_its_start(self, db):
        vehicle = add_vehicle(db)
        add_period(db, vehicle, start=date(2025, 7, 12), end=date(2025, 7, 14))

        assert run_sweep(db, TODAY).periods_started == []
        assert vehicle.status == "normal"


class TestSweepBehaviour:
    def test_second_run_changes_nothing(self, db):
        vehicle = add_vehicle(db, driver="Tanaka", status="repair")
        add_period(db, vehicle)
        add_temporary(db, vehicle, add_driver(db, name="Tanaka", employee_id="D900"))

        first = run_sweep(db, TODAY)
        second = run_sweep(db, TODAY)

        assert first.changed
        assert not second.changed
        assert second.failures == []
        assert (vehicle.driver, vehicle.status) == ("Sato", "normal")

    def test_one_failure_does_not_stop_the_sweep(self, db):
        broken = add_vehicle(db, plate="TRK-001", driver="Tanaka")
        healthy = add_vehicle(db, plate="TRK-002", driver="Ito")
        add_temporary(db, broken, add_driver(db, name="Tanaka", employee_id="D900"), original="Bad")
        good = add_temporary(db, healthy, add_driver(db, name="Ito", employee_id="D901"), original="Kato")

        def flaky_restore(vehicle, original_name):
            if original_name == "Bad":
                raise RuntimeError("store unavailable")
            restore_driver(vehicle, original_name)

        with patch("app.services.expiry_sweep.restore_driver", side_effect=flaky_restore):
            report = run_sweep(db, TODAY)

        assert report.assignments_restored == [good.id]
        assert len(report.failures) == 1
        assert report.failures[0].record_type == "temporary_assignment"
        assert healthy.driver == "Kato"
        assert broken.driver == "Tanaka"
        assert db.query(TemporaryAssignment).count() == 1

    def test_overlapping_pass_is_skipped(self):
        with expiry_sweep._sweep_lock:
            assert run_sweep_once(TODAY) is None

    def test_locked_pass_skipped_for_caller_session(self, db):
        with expiry_sweep._sweep_lock:
            assert run_sweep_locked(db, TODAY) is None

    def test_run_once_uses_fresh_session(self, session_factory):
        with patch("app.services.expiry_sweep.SessionLocal", session_factory):
            report = run_sweep_once(TODAY)
        assert report is not None
        assert not report.changed
