"""
Result SQLAlchemy Model

Every reference points to another service; none carries a foreign key.
"""

from sqlalchemy import Column, Integer, Text

from polyclinic.database.base import Base, TimestampMixin


class ResultModel(Base, TimestampMixin):
    """SQLAlchemy model for Result entity."""

    __tablename__ = "results"

    id = Column(Integer, primary_key=True, index=True)
    data = Column(Text, nullable=False)
    duty_id = Column(Integer, nullable=False, index=True)
    client_id = Column(Integer, nullable=False, index=True)
    doctor_id = Column(Integer, nullable=False, index=True)
