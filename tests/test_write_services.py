"""Store-backed tests for assignment, inoperative-period and inspection write paths."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date
from unittest.mock import AsyncMock, patch
from app.exceptions import NotFoundError, ValidationError
from app.models.driver import Driver
from app.models.enums import OperationStatus
from app.models.notification import Notification
from app.services.availability_resolver import available_drivers_for
from app.services.assignment_service import (
    create_assignment_change, create_temporary_assignment, delete_assignment_change, delete_temporary_assignment,
)
from app.services.expiry_sweep import run_sweep
from app.services.inoperative_service import complete_inoperative_period, create_inoperative_period
from app.services.inspection_service import cancel_booking, complete_booking, create_booking
from app.services.snapshots import VehicleSnapshot, load_context
from app.services.vacation_service import set_work_status
from app.services.vehicle_status_resolver import resolve
from conftest import add_driver, add_vehicle

TODAY = date(2025, 7, 1)


def make_fleet(db):
    vehicle = add_vehicle(db, driver="Sato")
    add_driver(db, name="Sato", employee_id="D001", assigned_vehicle_id=vehicle.id)
    spare = add_driver(db, name="Tanaka", employee_id="D002")
    return vehicle, spare


def status_of(db, vehicle, day):
    return resolve(VehicleSnapshot.from_model(vehicle), day, load_context(db, day, day))


class TestTemporaryAssignments:
    @pytest.mark.asyncio
    async def test_create_in_window_switches_driver(self, db):
        vehicle, spare = make_fleet(db)
        assignment = await create_temporary_assignment(db, spare.id, vehicle.id, TODAY, date(2025, 7, 3),
                                                       "admin", TODAY)
        assert assignment.original_driver_name == "Sato"
        assert vehicle.driver == "Tanaka"
        assert db.query(Notification).filter(Notification.notification_type == "temporary_assignment").count() == 1

    @pytest.mark.asyncio
    async def test_future_assignment_applied_by_sweep_on_start_date(self, db):
        vehicle, spare = make_fleet(db)
        await create_temporary_assignment(db, spare.id, vehicle.id, date(2025, 7, 5), date(2025, 7, 6), None, TODAY)
        assert vehicle.driver == "Sato"

        run_sweep(db, date(2025, 7, 4))
        assert vehicle.driver == "Sato"
        run_sweep(db, date(2025, 7, 5))
        assert vehicle.driver == "Tanaka"
        run_sweep(db, date(2025, 7, 7))
        assert vehicle.driver == "Sato"

    @pytest.mark.asyncio
    async def test_live_assignment_does_not_hide_name_matched_driver(self, db):
        vehicle = add_vehicle(db, driver="Sato")
        sato = add_driver(db, name="Sato", employee_id="D001")
        spare = add_driver(db, name="Tanaka", employee_id="D002")
        await create_temporary_assignment(db, spare.id, vehicle.id, TODAY, date(2025, 7, 2), None, TODAY)
        set_work_status(db, sato, date(2025, 7, 20), "day_off")

        later = date(2025, 7, 20)
        status = status_of(db, vehicle, later)
        assert status.status == OperationStatus.INACTIVE_VACATION
        assert status.assigned_driver_name == "Sato"
        working_day = date(2025, 7, 21)
        free = [d.name for d in available_drivers_for(working_day, load_context(db, working_day, working_day))]
        assert free == ["Tanaka"]

    @pytest.mark.asyncio
    async def test_assignment_created_during_another_captures_base_driver(self, db):
        vehicle = add_vehicle(db, driver="Sato")
        add_driver(db, name="Sato", employee_id="D001")
        first = add_driver(db, name="Tanaka", employee_id="D002")
        second = add_driver(db, name="Ito", employee_id="D003")
        await create_temporary_assignment(db, first.id, vehicle.id, TODAY, date(2025, 7, 2), None, TODAY)
        later = await create_temporary_assignment(db, second.id, vehicle.id, date(2025, 7, 5), date(2025, 7, 6),
                                                  None, TODAY)
        assert vehicle.driver == "Tanaka"
        assert later.original_driver_name == "Sato"

    @pytest.mark.asyncio
    async def test_structural_driver_is_not_eligible(self, db):
        vehicle, _ = make_fleet(db)
        other = add_vehicle(db, plate="TRK-002")
        sato = db.query(Driver).filter_by(name="Sato").one()
        with pytest.raises(ValidationError):
            await create_temporary_assignment(db, sato.id, other.id, TODAY, TODAY, None, TODAY)

    @pytest.mark.asyncio
    async def test_driver_on_vacation_is_not_eligible(self, db):
        vehicle, spare = make_fleet(db)
        set_work_status(db, spare, date(2025, 7, 2), "day_off")
        with pytest.raises(ValidationError):
            await create_temporary_assignment(db, spare.id, vehicle.id, TODAY, date(2025, 7, 3), None, TODAY)

    @pytest.mark.asyncio
    async def test_reversed_range_rejected(self, db):
        vehicle, spare = make_fleet(db)
        with pytest.raises(ValidationError):
            await create_temporary_assignment(db, spare.id, vehicle.id, date(2025, 7, 3), TODAY, None, TODAY)

    @pytest.mark.asyncio
    async def test_unknown_vehicle(self, db):
        _, spare = make_fleet(db)
        with pytest.raises(NotFoundError):
            await create_temporary_assignment(db, spare.id, 999, TODAY, TODAY, None, TODAY)

    @pytest.mark.asyncio
    async def test_delete_in_window_restores_driver(self, db):
        vehicle, spare = make_fleet(db)
        assignment = await create_temporary_assignment(db, spare.id, vehicle.id, TODAY, TODAY, None, TODAY)
        await delete_temporary_assignment(db, assignment.id, TODAY)
        assert vehicle.driver == "Sato"


class TestAssignmentChanges:
    @pytest.mark.asyncio
    async def test_change_overrides_vacation(self, db):
        vehicle, spare = make_fleet(db)
        sato = db.query(Driver).filter_by(name="Sato").one()
        set_work_status(db, sato, TODAY, "day_off")
        assert status_of(db, vehicle, TODAY).status == OperationStatus.INACTIVE_VACATION

        change = await create_assignment_change(db, vehicle.id, TODAY, spare.id, reason="cover for Sato")

        assert change.original_driver_name == "Sato"
        status = status_of(db, vehicle, TODAY)
        assert status.status == OperationStatus.REASSIGNED
        assert status.assigned_driver_name == "Tanaka"

    @pytest.mark.asyncio
    async def test_reassigning_to_structural_driver_rejected(self, db):
        vehicle, spare = make_fleet(db)
        sato = db.query(Driver).filter_by(name="Sato").one()
        with pytest.raises(ValidationError):
            await create_assignment_change(db, vehicle.id, TODAY, sato.id)

    @pytest.mark.asyncio
    async def test_delete(self, db):
        vehicle, spare = make_fleet(db)
        change = await create_assignment_change(db, vehicle.id, TODAY, spare.id, end_date=date(2025, 7, 2))
        change_id = change.id
        await delete_assignment_change(db, change_id)
        assert status_of(db, vehicle, TODAY).status == OperationStatus.ACTIVE
        with pytest.raises(NotFoundError):
            await delete_assignment_change(db, change_id)


class TestInoperativePeriods:
    @pytest.mark.asyncio
    async def test_create_current_period_sets_repair(self, db):
        vehicle, _ = make_fleet(db)
        period = await create_inoperative_period(db, vehicle.id, TODAY, date(2025, 7, 4), "breakdown",
                                                 "engine", TODAY)
        assert period.original_driver_name == "Sato"
        assert vehicle.status == "repair"
        assert status_of(db, vehicle, date(2025, 7, 4)).reason == "breakdown: engine"

    @pytest.mark.asyncio
    async def test_future_period_puts_vehicle_in_repair_on_start_date(self, db):
        vehicle, _ = make_fleet(db)
        await create_inoperative_period(db, vehicle.id, date(2025, 7, 5), date(2025, 7, 6), "repair", None, TODAY)
        assert vehicle.status == "normal"

        run_sweep(db, date(2025, 7, 5))
        assert vehicle.status == "repair"
        run_sweep(db, date(2025, 7, 7))
        assert vehicle.status == "normal"

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, db):
        vehicle, _ = make_fleet(db)
        with pytest.raises(ValidationError):
            await create_inoperative_period(db, vehicle.id, TODAY, TODAY, "flood", None, TODAY)

    @pytest.mark.asyncio
    async def test_complete_resets_vehicle(self, db):
        vehicle, _ = make_fleet(db)
        period = await create_inoperative_period(db, vehicle.id, TODAY, date(2025, 7, 4), "repair", None, TODAY)
        await complete_inoperative_period(db, period.id, TODAY)
        assert period.status == "completed"
        assert vehicle.status == "normal"
        assert status_of(db, vehicle, TODAY).status == OperationStatus.ACTIVE


class TestInspectionBookings:
    @pytest.mark.asyncio
    async def test_range_booking(self, db):
        vehicle, _ = make_fleet(db)
        booking = await create_booking(db, vehicle.id, date(2025, 7, 31), start_date=date(2025, 7, 10),
                                       end_date=date(2025, 7, 12), memo="shaken")
        assert booking.driver_name == "Sato"
        assert booking.scheduled_date is None
        assert status_of(db, vehicle, date(2025, 7, 11)).status == OperationStatus.INACTIVE_INSPECTION

    @pytest.mark.asyncio
    async def test_range_past_deadline_rejected(self, db):
        vehicle, _ = make_fleet(db)
        with pytest.raises(ValidationError):
            await create_booking(db, vehicle.id, date(2025, 7, 11), start_date=date(2025, 7, 10),
                                 end_date=date(2025, 7, 12))

    @pytest.mark.asyncio
    async def test_needs_exactly_one_date_form(self, db):
        vehicle, _ = make_fleet(db)
        with pytest.raises(ValidationError):
            await create_booking(db, vehicle.id, date(2025, 7, 31))
        with pytest.raises(ValidationError):
            await create_booking(db, vehicle.id, date(2025, 7, 31), scheduled_date=date(2025, 7, 10),
                                 start_date=date(2025, 7, 10), end_date=date(2025, 7, 11))

    @pytest.mark.asyncio
    async def test_cancelled_booking_no_longer_blocks(self, db):
        vehicle, _ = make_fleet(db)
        booking = await create_booking(db, vehicle.id, date(2025, 7, 31), scheduled_date=date(2025, 7, 10))
        await cancel_booking(db, booking.id)
        assert status_of(db, vehicle, date(2025, 7, 10)).status == OperationStatus.ACTIVE
        with pytest.raises(ValidationError):
            complete_booking(db, booking.id)
        types = [n.notification_type for n in db.query(Notification).order_by(Notification.id)]
        assert types == ["inspection_reserved", "inspection_cancelled"]


class TestNotificationsAreBestEffort:
    @pytest.mark.asyncio
    async def test_webhook_failure_does_not_fail_write(self, db):
        import httpx
        vehicle, _ = make_fleet(db)
        failing = AsyncMock(side_effect=httpx.ConnectError("down"))
        with patch("app.services.notification_service.settings.NOTIFY_WEBHOOK_URL", "http://hooks.local/fleet"), \
             patch("httpx.AsyncClient.post", failing):
            period = await create_inoperative_period(db, vehicle.id, TODAY, TODAY, "repair", None, TODAY)
        assert period.id is not None
        failing.assert_awaited_once()
        assert db.query(Notification).count() == 1
