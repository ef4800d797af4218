"""
Per-space booking calendar version.

One row per space that has ever been booked. Booking creation claims the
row with a compare-and-swap on `version` after its conflict check, so two
overlapping creates for the same space can never both commit: the loser's
claim matches zero rows and it re-runs the check against the winner's
committed booking.
"""

from sqlalchemy import Column, ForeignKey, Integer

from app.db.base import Base


class SpaceCalendar(Base):
    __tablename__ = "space_calendars"

    space_id = Column(Integer, ForeignKey("spaces.id"), primary_key=True)
    version = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<SpaceCalendar(space={self.space_id}, version={self.version})>"
