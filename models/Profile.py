from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(128), primary_key=True, index=True)  # Firebase uid
    email = Column(String(255), nullable=True, index=True)
    full_name = Column(String(150), nullable=True)
    credits = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    trips = relationship("Trip", back_populates="owner", cascade="all, delete-orphan")
    transactions = relationship("CreditTransaction", back_populates="profile", cascade="all, delete-orphan")
