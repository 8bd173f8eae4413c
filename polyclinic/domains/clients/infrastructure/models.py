"""
Client SQLAlchemy Models
"""

from sqlalchemy import Boolean, Column, Enum as SQLEnum, Integer, String

from polyclinic.core.domain import Sex
from polyclinic.database.base import Base, TimestampMixin


class ClientModel(Base, TimestampMixin):
    """SQLAlchemy model for Client entity."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    sex = Column(SQLEnum(Sex, name="client_sex"), nullable=False)
    phone_number = Column(String(50), nullable=False)

    # Address
    country = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    street = Column(String(255), nullable=False)
    house_number = Column(Integer, nullable=False)

    enabled = Column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, email='{self.email}')>"
