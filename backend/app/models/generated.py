import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    Index,
    ForeignKey,
    Integer,
    Text,
    Time,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


# Statuses that occupy a staff member's time
ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)


class Users(Base):
    __tablename__ = 'users'

    first_name = Column(Text, nullable=False)
    role = Column(Enum('client', 'admin', name='user_role'), nullable=False, server_default=text("'client'"))
    is_active = Column(Boolean, nullable=False, default=True)
    id = Column(Integer, primary_key=True)
    last_name = Column(Text)
    email = Column(Text, unique=True)
    phone = Column(Text)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    appointments = relationship('Appointments', back_populates='client')

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'


class StaffMembers(Base):
    __tablename__ = 'staff_members'

    first_name = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    id = Column(Integer, primary_key=True)
    last_name = Column(Text)
    specialization = Column(Text)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    working_hours = relationship('WorkingHours', back_populates='staff_member')
    holidays = relationship('Holidays', back_populates='staff_member')
    appointments = relationship('Appointments', back_populates='staff_member')

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


class Services(Base):
    __tablename__ = 'services'
    __table_args__ = (
        CheckConstraint('duration_minutes > 0'),
    )

    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    category = Column(Text)

    appointments = relationship('Appointments', back_populates='service')


class WorkingHours(Base):
    __tablename__ = 'working_hours'
    __table_args__ = (
        UniqueConstraint('staff_id', 'day_of_week'),
        CheckConstraint('day_of_week BETWEEN 1 AND 7'),
    )

    staff_id = Column(ForeignKey('staff_members.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 1 = Monday ... 7 = Sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    id = Column(Integer, primary_key=True)
    break_start = Column(Time)
    break_end = Column(Time)

    staff_member = relationship('StaffMembers', back_populates='working_hours')


class Holidays(Base):
    __tablename__ = 'holidays'

    name = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_recurring = Column(Boolean, nullable=False, default=False)
    id = Column(Integer, primary_key=True)
    staff_id = Column(ForeignKey('staff_members.id', ondelete='CASCADE'))  # NULL = salon closure

    staff_member = relationship('StaffMembers', back_populates='holidays')


class Appointments(Base):
    __tablename__ = 'appointments'

    client_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    staff_id = Column(ForeignKey('staff_members.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    appointment_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(
        Enum(AppointmentStatus, name='appointment_status', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )
    id = Column(Integer, primary_key=True)
    notes = Column(Text)
    cancellation_reason = Column(Text)
    cancelled_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    client = relationship('Users', back_populates='appointments')
    service = relationship('Services', back_populates='appointments')
    staff_member = relationship('StaffMembers', back_populates='appointments')


# Storage safety net: two active appointments of a staff member cannot share a start.
# Partial, so cancelled/completed rows do not block re-booking the same time.
Index(
    'uq_appointments_active_start',
    Appointments.staff_id,
    Appointments.appointment_date,
    Appointments.start_time,
    unique=True,
    sqlite_where=Appointments.status.in_(ACTIVE_STATUSES),
    postgresql_where=Appointments.status.in_(ACTIVE_STATUSES),
)
