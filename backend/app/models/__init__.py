from app.models.user import User
from app.models.space import Space
from app.models.space_calendar import SpaceCalendar
from app.models.booking import Booking

__all__ = ["User", "Space", "SpaceCalendar", "Booking"]
