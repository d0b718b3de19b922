from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func
from .database import Base


class HealthRecord(Base):
    __tablename__ = "health_records"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False)
    height = Column(Float, nullable=False)   # cm
    weight = Column(Float, nullable=False)   # kg
    # derived from height/weight, written only by the service
    bmi = Column(Float, nullable=False)
    bmi_category = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
