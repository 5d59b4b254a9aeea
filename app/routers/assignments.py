# app/routers/assignments.py
"""Temporary assignments and one-off assignment changes."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import date
from app.database import get_db
from app.schemas.assignment import (
    AssignmentChangeCreate, AssignmentChangeOut, TemporaryAssignmentCreate, TemporaryAssignmentOut,
)
from app.services.assignment_service import (
    create_assignment_change, create_temporary_assignment, delete_assignment_change, delete_temporary_assignment,
)

router = APIRouter()


@router.post("/assignments/temporary", response_model=TemporaryAssignmentOut, summary="Create a temporary assignment")
async def add_temporary_assignment(body: TemporaryAssignmentCreate, db: Session = Depends(get_db)):
    return await create_temporary_assignment(db, body.driver_id, body.vehicle_id, body.start_date,
                                             body.end_date, body.created_by, date.today())


@router.delete("/assignments/temporary/{assignment_id}", summary="Delete a temporary assignment")
async def remove_temporary_assignment(assignment_id: int, db: Session = Depends(get_db)):
    await delete_temporary_assignment(db, assignment_id, date.today())
    return {"status": "deleted", "id": assignment_id}


@router.post("/assignments/changes", response_model=AssignmentChangeOut, summary="Reassign a vehicle for a day or range")
async def add_assignment_change(body: AssignmentChangeCreate, db: Session = Depends(get_db)):
    return await create_assignment_change(db, body.vehicle_id, body.date, body.new_driver_id, body.reason,
                                          body.end_date, body.is_temporary, body.created_by)


@router.delete("/assignments/changes/{change_id}", summary="Delete an assignment change")
async def remove_assignment_change(change_id: int, db: Session = Depends(get_db)):
    await delete_assignment_change(db, change_id)
    return {"status": "deleted", "id": change_id}
