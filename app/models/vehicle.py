# app/models/vehicle.py
"""
Fleet vehicles.
`driver` is the denormalized name of the current driver. Only
app/services/vehicle_driver.py writes it; `status` is also reset by the expiry sweep.
"""

from sqlalchemy import Column, Integer, String, Date, Text
from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plate_number = Column(String(50), unique=True, nullable=False, index=True)
    model = Column(String(100), nullable=False)
    team = Column(String(100), nullable=False, index=True)
    garage = Column(String(100))
    driver = Column(String(200))                          # current driver name, nullable
    status = Column(String(20), default="normal", nullable=False)  # normal | inspection | repair
    last_inspection_date = Column(Date)
    next_inspection_date = Column(Date)
    crane_annual_inspection_date = Column(Date)
    notes = Column(Text)

    def __repr__(self):
        return f"<Vehicle {self.plate_number} driver={self.driver} status={self.status}>"
