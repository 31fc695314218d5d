from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, func, Float, Boolean
from sqlalchemy.orm import relationship
from database import Base


class Trip(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(128), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    # Origin / destination as typed by the user plus the normalized location, when known
    origin_city = Column(String(150), nullable=False)
    origin_iata_code = Column(String(8), nullable=True)
    origin_country = Column(String(100), nullable=True)
    origin_lat = Column(Float, nullable=True)
    origin_lon = Column(Float, nullable=True)
    destination_city = Column(String(150), nullable=False)
    destination_iata_code = Column(String(8), nullable=True)
    destination_country = Column(String(100), nullable=True)
    destination_lat = Column(Float, nullable=True)
    destination_lon = Column(Float, nullable=True)
    departure_date = Column(Date, nullable=True)
    return_date = Column(Date, nullable=True)
    adults = Column(Integer, default=1, nullable=False)
    children = Column(Integer, default=0, nullable=False)
    infants = Column(Integer, default=0, nullable=False)
    flight_class = Column(String(20), default="economy", nullable=False)
    include_car = Column(Boolean, default=False, nullable=False)
    include_hotel = Column(Boolean, default=False, nullable=False)
    status = Column(String(20), default="preview", nullable=False)  # preview | complete
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owner = relationship("Profile", back_populates="trips")
    items = relationship(
        "TripItem",
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by="TripItem.id",
    )
