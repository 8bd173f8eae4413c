"""
Registration SQLAlchemy Models

`doctor_id` and `client_id` reference other services and carry no foreign key.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from polyclinic.database.base import Base, TimestampMixin


class DutyModel(Base, TimestampMixin):
    """SQLAlchemy model for Duty entity."""

    __tablename__ = "duties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=False)
    needed_specialty = Column(String(100), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)


class RegistrationModel(Base, TimestampMixin):
    """SQLAlchemy model for Registration entity."""

    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    duty_id = Column(Integer, ForeignKey("duties.id"), nullable=True, index=True)
    date = Column(DateTime, nullable=False)
    doctor_id = Column(Integer, nullable=False, index=True)
    client_id = Column(Integer, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
