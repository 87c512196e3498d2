from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from app.database import Base


class PhoneVerification(Base):
    """One OTP attempt. Rows are never deleted; cooldown and fallback checks read the history."""

    __tablename__ = "phone_verifications"

    id = Column(Integer, primary_key=True, index=True)
    phone = Column(String, nullable=False, index=True)
    code = Column(String(6), nullable=False)
    token = Column(String(64), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    verified_at = Column(DateTime, nullable=True)
