"""
Doctor Service - Business logic for doctor profile management.
"""
from sqlalchemy.orm import Session
import logging

from ..auth.models import User
from .models import Doctor

# Set up logging
logger = logging.getLogger(__name__)

def create_doctor_profile(db: Session, user: User) -> Doctor:
    """
    Create the doctor profile for a user registering as a doctor and link both records.

    The profile copies the user's identity fields and starts with empty
    professional fields. The caller owns the transaction: the rows are only
    flushed here, not committed.

    Args:
        db: Database session
        user: Freshly created (flushed) user with ``is_doctor`` set

    Returns:
        Doctor: The new doctor profile
    """
    doctor = Doctor(
        doctor_id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        gender=user.gender,
        profile_picture=user.profile_picture,
        description="",
        experience="",
        price=0
    )
    db.add(doctor)
    db.flush()

    user.doctor_id = doctor.id
    db.flush()
    logger.info(f"Created doctor profile {doctor.id} for user {user.id}")
    return doctor
