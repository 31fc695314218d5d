from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base


class TripItem(Base):
    __tablename__ = "trip_items"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    item_type = Column(String(20), nullable=False)  # flight, car, hotel, transport, attraction, activity
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    cost = Column(Float, nullable=True)
    currency = Column(String(3), default="EUR", nullable=False)
    included = Column(Boolean, default=True, nullable=False)
    # Null for flights, car and hotel; set for day-by-day activities
    day_number = Column(Integer, nullable=True)
    order_in_day = Column(Integer, nullable=True)
    provider_data = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    trip = relationship("Trip", back_populates="items")
