"""
Clinic SQLAlchemy Models
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Table

from polyclinic.database.base import Base, TimestampMixin

# No ON DELETE cascade: deleting a linked department must fail.
department_facility = Table(
    "department_facility",
    Base.metadata,
    Column("department_id", Integer, ForeignKey("departments.id"), primary_key=True),
    Column("facility_id", Integer, ForeignKey("facilities.id"), primary_key=True),
)


class DepartmentModel(Base, TimestampMixin):
    """SQLAlchemy model for Department entity."""

    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)

    # Address
    country = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    street = Column(String(255), nullable=False)
    house_number = Column(Integer, nullable=False)


class FacilityModel(Base, TimestampMixin):
    """SQLAlchemy model for MedicalFacility entity."""

    __tablename__ = "facilities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
