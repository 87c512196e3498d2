from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # At least one of email/phone is set, depending on how the user signed up
    email = Column(String, unique=True, index=True, nullable=True)
    phone = Column(String, unique=True, index=True, nullable=True)

    name = Column(String, nullable=False, default="User")
    profile_image_url = Column(String, nullable=True)
    auth_provider = Column(String, nullable=True)  # google | phone

    email_verified = Column(Boolean, default=False, nullable=False)
    phone_verified = Column(Boolean, default=False, nullable=False)

    user_type = Column(String, default="creator", nullable=False)
    status = Column(String, default="active", nullable=False)
    onboarding_step = Column(Integer, default=0, nullable=False)

    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    creator_profile = relationship("CreatorProfile", back_populates="user", uselist=False)
