from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Table,
    Text,
    Time,
    UniqueConstraint,
    func,
    text,
    true,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


RESERVATION_STATUSES = ("REQUESTED", "CONFIRMED", "CANCELLED", "COMPLETED")
RESERVATION_TYPES = ("online", "manual")
HOLIDAY_TYPES = ("NATIONAL", "CUSTOM")

# Statuses that occupy the employee's time
BLOCKING_STATUSES = ("REQUESTED", "CONFIRMED")


class Salons(Base):
    __tablename__ = 'salons'

    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    employees = relationship('Employees', back_populates='salon', cascade='all, delete-orphan')
    services = relationship('Services', back_populates='salon', cascade='all, delete-orphan')
    working_hours = relationship('WorkingHours', back_populates='salon', cascade='all, delete-orphan')
    holidays = relationship('Holidays', back_populates='salon', cascade='all, delete-orphan')
    reservations = relationship('Reservations', back_populates='salon', cascade='all, delete-orphan')


t_employee_services = Table(
    'employee_services', metadata,
    Column('employee_id', ForeignKey('employees.id', ondelete='CASCADE'), primary_key=True),
    Column('service_id', ForeignKey('services.id', ondelete='CASCADE'), primary_key=True),
)


class Employees(Base):
    __tablename__ = 'employees'

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True)
    full_name = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    id = Column(Integer, primary_key=True)

    salon = relationship('Salons', back_populates='employees')
    services = relationship('Services', secondary=t_employee_services, back_populates='employees')
    reservations = relationship('Reservations', back_populates='employee')


class Services(Base):
    __tablename__ = 'services'
    __table_args__ = (
        CheckConstraint('duration_min > 0', name='ck_services_duration_positive'),
    )

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(Text, nullable=False)
    duration_min = Column(Integer, nullable=False)
    price = Column(Float, nullable=False, server_default=text('0'))
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    id = Column(Integer, primary_key=True)

    salon = relationship('Salons', back_populates='services')
    employees = relationship('Employees', secondary=t_employee_services, back_populates='services')
    reservations = relationship('Reservations', back_populates='service')


class Clients(Base):
    __tablename__ = 'clients'

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True)
    full_name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    phone = Column(Text)
    email = Column(Text)

    reservations = relationship('Reservations', back_populates='client')


class WorkingHours(Base):
    __tablename__ = 'working_hours'
    __table_args__ = (
        UniqueConstraint('salon_id', 'weekday'),
        CheckConstraint('weekday BETWEEN 0 AND 6', name='ck_working_hours_weekday'),
    )

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False)
    weekday = Column(Integer, nullable=False)  # 0 = Sunday … 6 = Saturday
    id = Column(Integer, primary_key=True)
    start_time = Column(Time)
    end_time = Column(Time)
    break_start = Column(Time)
    break_end = Column(Time)

    salon = relationship('Salons', back_populates='working_hours')


class Holidays(Base):
    __tablename__ = 'holidays'
    __table_args__ = (
        UniqueConstraint('salon_id', 'date'),
    )

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False)
    date = Column(Date, nullable=False)
    name = Column(Text, nullable=False)
    type = Column(Enum(*HOLIDAY_TYPES, name='holiday_type'), nullable=False, default='CUSTOM', server_default=text("'CUSTOM'"))
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    id = Column(Integer, primary_key=True)

    salon = relationship('Salons', back_populates='holidays')


class Reservations(Base):
    __tablename__ = 'reservations'
    __table_args__ = (
        CheckConstraint('start_at < end_at', name='ck_reservations_interval'),
        Index('ix_reservations_employee_start', 'employee_id', 'start_at'),
    )

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True)
    employee_id = Column(ForeignKey('employees.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    status = Column(Enum(*RESERVATION_STATUSES, name='reservation_status'), nullable=False, default='CONFIRMED', server_default=text("'CONFIRMED'"))
    type = Column(Enum(*RESERVATION_TYPES, name='reservation_type'), nullable=False, default='online', server_default=text("'online'"))
    id = Column(Integer, primary_key=True)
    client_id = Column(ForeignKey('clients.id', ondelete='SET NULL'))
    client_full_name = Column(Text)
    client_phone = Column(Text)
    notes = Column(Text)
    cancel_reason = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    salon = relationship('Salons', back_populates='reservations')
    employee = relationship('Employees', back_populates='reservations')
    service = relationship('Services', back_populates='reservations')
    client = relationship('Clients', back_populates='reservations')
