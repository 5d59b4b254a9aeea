# Fleet Operations — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.vehicle import Vehicle                                  # noqa
from app.models.driver import Driver                                    # noqa
from app.models.vacation_request import VacationRequest                 # noqa
from app.models.vacation_settings import VacationSettingsRecord         # noqa
from app.models.inoperative_period import VehicleInoperativePeriod      # noqa
from app.models.inspection_booking import InspectionBooking             # noqa
from app.models.temporary_assignment import TemporaryAssignment         # noqa
from app.models.assignment_change import VehicleAssignmentChange        # noqa
from app.models.notification import Notification                        # noqa
