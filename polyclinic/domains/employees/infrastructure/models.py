"""
Employee SQLAlchemy Models

Single table for every role, discriminated by `role`. `department_id`
references the clinic service and carries no foreign key.
"""

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Numeric, String, Table

from polyclinic.database.base import Base, TimestampMixin

# No ON DELETE cascade: a doctor still in a team cannot be deleted.
team_members = Table(
    "team_members",
    Base.metadata,
    Column("manager_id", Integer, ForeignKey("employees.id"), primary_key=True),
    Column("doctor_id", Integer, ForeignKey("employees.id"), primary_key=True),
)


class EmployeeModel(Base, TimestampMixin):
    """SQLAlchemy model for Employee entity."""

    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String(20), nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    department_id = Column(Integer, nullable=True, index=True)

    # Personal data
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    salary = Column(Numeric(12, 2), nullable=False)
    hire_date = Column(Date, nullable=False)
    date_of_birth = Column(Date, nullable=False)
    sex = Column(String(10), nullable=False)
    country = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    street = Column(String(255), nullable=False)
    house_number = Column(Integer, nullable=False)

    # Doctor
    specialty = Column(String(100), nullable=True, index=True)
    practice_beginning_date = Column(Date, nullable=True)
