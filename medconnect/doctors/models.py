"""
Doctor Model - Stores the public profile of users who registered as doctors.

The profile and its owning user reference each other: ``Doctor.doctor_id``
holds the user's id and ``User.doctor_id`` holds the profile's id.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Enum, func
from sqlalchemy.orm import relationship
from ..database import Base
from ..auth.models import Gender

class Doctor(Base):
    """
    Doctor Model - Stores doctor-specific information

    Fields:
    - id: Primary key for doctor profile
    - doctor_id: Foreign key to the owning User (same value as the user's id)
    - first_name / last_name / email / gender / profile_picture: Copied from the user at registration
    - description: Professional description, empty until the doctor fills it in
    - experience: Professional experience, empty until the doctor fills it in
    - price: Consultation price
    - created_at: When the doctor profile was created
    """
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    gender = Column(Enum(Gender), nullable=False, default=Gender.UNSPECIFIED)
    profile_picture = Column(String, nullable=True)
    description = Column(String, nullable=False, default="")
    experience = Column(String, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False, default=0)  # 10 digits total, 2 decimal places
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="doctor_profile", uselist=False)

    def __repr__(self):
        """String representation of the Doctor model"""
        return f"<Doctor(id={self.id}, doctor_id={self.doctor_id}, email='{self.email}')>"
