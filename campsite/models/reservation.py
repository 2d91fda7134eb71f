import uuid
from datetime import datetime, date
from sqlalchemy import Column, String, Date, DateTime, Integer, Index, CheckConstraint
from sqlalchemy.orm import relationship
from ..database import Base
from ..exceptions import NotAllowedError
from ..utils.date_range import days_in_range
import enum


class ReservationStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"  # terminal


class Reservation(Base):
    __tablename__ = "reservations"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    guest_name = Column(String(200), nullable=False)
    guest_email = Column(String(255), nullable=False)
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=ReservationStatus.ACTIVE.value)
    cancelled_date = Column(Date, nullable=True)
    
    # Bumped on every UPDATE; a stale copy fails to flush instead of overwriting
    version = Column(Integer, nullable=False, default=1)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    occupied_days = relationship("OccupiedDay", back_populates="reservation", passive_deletes=True)
    
    __mapper_args__ = {"version_id_col": version}
    
    __table_args__ = (
        CheckConstraint("check_in_date < check_out_date", name="ck_reservation_dates_ordered"),
        Index("ix_reservation_status", "status"),
        Index("ix_reservation_dates", "check_in_date", "check_out_date"),
    )
    
    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.ACTIVE.value
    
    def days(self) -> list:
        """Calendar days occupied by this reservation, [check_in, check_out)."""
        return days_in_range(self.check_in_date, self.check_out_date)
    
    def ensure_active(self) -> None:
        if not self.is_active:
            raise NotAllowedError("The reservation that has been cancelled cannot be updated")
    
    def cancel(self, on: date) -> None:
        self.ensure_active()
        self.status = ReservationStatus.CANCELLED.value
        self.cancelled_date = on
    
    def __repr__(self):
        return f"<Reservation {self.id} {self.check_in_date}..{self.check_out_date} {self.status}>"
