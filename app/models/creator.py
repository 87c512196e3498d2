from datetime import datetime

from sqlalchemy import JSON, BigInteger, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.database import Base


class CreatorProfile(Base):
    __tablename__ = "creator_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)

    gender = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    location_state = Column(String, nullable=True)
    location_city = Column(String, nullable=True)
    location_pincode = Column(String, nullable=True)

    bio = Column(Text, nullable=True)
    content_categories = Column(JSON, nullable=True)
    interests = Column(JSON, nullable=True)  # languages picked during onboarding

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="creator_profile")
    packages = relationship(
        "Package",
        back_populates="creator",
        cascade="all, delete-orphan",
        order_by="Package.id",
    )
    portfolio_items = relationship(
        "PortfolioItem",
        back_populates="creator",
        cascade="all, delete-orphan",
        order_by="PortfolioItem.id",
    )
    kyc = relationship("KYC", back_populates="creator", uselist=False, cascade="all, delete-orphan")


class Package(Base):
    __tablename__ = "packages"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("creator_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    package_type = Column(String, default="content", nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    platform = Column(String, nullable=False)
    content_type = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    revisions = Column(Integer, nullable=False, default=0)
    duration = Column(String, nullable=True)
    price = Column(Float, nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    status = Column(String, default="active", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    creator = relationship("CreatorProfile", back_populates="packages")


class PortfolioItem(Base):
    __tablename__ = "portfolio_items"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("creator_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    media_type = Column(String, nullable=False)  # IMAGE | VIDEO | ARCHIVE | DOCUMENT
    media_url = Column(String, nullable=False)
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    file_size = Column(BigInteger, nullable=True)
    mime_type = Column(String, nullable=True)
    status = Column(String, default="active", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    creator = relationship("CreatorProfile", back_populates="portfolio_items")


class KYC(Base):
    __tablename__ = "kyc"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("creator_profiles.id", ondelete="CASCADE"), unique=True, nullable=False)
    document_type = Column(String, nullable=False)  # AADHAAR | PAN
    document_front_url = Column(String, nullable=False)
    document_back_url = Column(String, nullable=False)
    # pending until reviewed; approved/rejected are set outside this service
    status = Column(String, default="pending", nullable=False)
    submitted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    creator = relationship("CreatorProfile", back_populates="kyc")
