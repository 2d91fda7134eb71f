"""
Occupied Day Model

One row per calendar day claimed by an active reservation.
The primary key on the day is what makes a double booking impossible.
"""

from datetime import datetime
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from ..database import Base


class OccupiedDay(Base):
    """
    Availability index entry for the campsite.
    
    Used for:
    - Fast availability lookups
    - Conflict detection (unique day)
    """
    __tablename__ = "occupied_days"
    
    day = Column(Date, primary_key=True)
    
    # Owner of the day; markers are only ever released by their owner
    reservation_id = Column(String(36), ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    reservation = relationship("Reservation", back_populates="occupied_days")
    
    __table_args__ = (
        Index('ix_occupied_days_reservation', 'reservation_id'),
    )
    
    def __repr__(self):
        return f"<OccupiedDay {self.day} reservation={self.reservation_id}>"
