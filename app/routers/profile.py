import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, joinedload

from app.database import get_db
from app.models.creator import KYC, CreatorProfile, Package, PortfolioItem
from app.models.user import User
from app.schemas.creator import (
    BasicInfoUpdate,
    CreatorProfileResponse,
    KycResponse,
    KycSubmit,
    PackageCreate,
    PackageResponse,
    PortfolioCreate,
    PortfolioItemResponse,
    PreferencesUpdate,
    UserProfileResponse,
)
from app.services.auth_middleware import get_current_user
from app.utils.response import create_response, handle_exception

router = APIRouter(prefix="/api/profile", tags=["Profile"], dependencies=[Depends(get_current_user)])
logger = logging.getLogger(__name__)


def _get_or_create_creator_profile(db: Session, user: User) -> CreatorProfile:
    profile = db.query(CreatorProfile).filter(CreatorProfile.user_id == user.id).first()
    if not profile:
        profile = CreatorProfile(user_id=user.id)
        db.add(profile)
    return profile


def _require_creator_profile(db: Session, user: User) -> CreatorProfile:
    profile = db.query(CreatorProfile).filter(CreatorProfile.user_id == user.id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Creator profile not found")
    return profile


@router.post("/update-basic-info")
def update_basic_info(
    body: BasicInfoUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        email_owner = (
            db.query(User.id)
            .filter(User.email == body.email, User.id != current_user.id)
            .first()
        )
        if email_owner:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")

        current_user.email = body.email
        current_user.email_verified = True
        current_user.onboarding_step = 2

        profile = _get_or_create_creator_profile(db, current_user)
        profile.gender = body.gender
        profile.date_of_birth = body.dob
        profile.location_state = body.state
        profile.location_city = body.city
        profile.location_pincode = body.pincode

        db.commit()
        db.refresh(profile)
        return create_response(
            message="Basic info updated successfully",
            data={"profile": CreatorProfileResponse.model_validate(profile).model_dump()},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to update basic info")


@router.post("/update-preferences")
def update_preferences(
    body: PreferencesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        profile = _get_or_create_creator_profile(db, current_user)
        profile.content_categories = body.categories
        profile.bio = body.about
        profile.interests = body.languages

        current_user.onboarding_step = 1

        db.commit()
        db.refresh(profile)
        return create_response(
            message="Preferences updated successfully",
            data={"profile": CreatorProfileResponse.model_validate(profile).model_dump()},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to update preferences")


@router.post("/create-package")
def create_package(
    body: PackageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        profile = _require_creator_profile(db, current_user)
        package = Package(
            creator_id=profile.id,
            package_type="content",
            title=f"{body.platform} {body.content_type}",
            description=body.description or "",
            platform=body.platform.upper(),
            content_type=body.content_type,
            quantity=body.quantity,
            revisions=body.revisions,
            duration=f"{body.duration1} {body.duration2}",
            price=body.price,
            currency="INR",
            status="active",
        )
        db.add(package)
        db.commit()
        db.refresh(package)
        logger.info("Creator %s created package id=%s", profile.id, package.id)
        return create_response(
            message="Package created successfully",
            data={"package": PackageResponse.model_validate(package).model_dump()},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to create package")


@router.post("/create-portfolio")
def create_portfolio_item(
    body: PortfolioCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        profile = _require_creator_profile(db, current_user)
        item = PortfolioItem(
            creator_id=profile.id,
            media_type=body.media_type.upper(),
            media_url=body.media_url,
            title=body.file_name,
            description=f"Uploaded file: {body.file_name}",
            file_size=body.file_size,
            mime_type=body.mime_type or "",
            status="active",
        )
        db.add(item)
        db.commit()
        db.refresh(item)
        return create_response(
            message="Portfolio item created successfully",
            data={"portfolioItem": PortfolioItemResponse.model_validate(item).model_dump()},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to create portfolio item")


@router.post("/submit-kyc")
def submit_kyc(
    body: KycSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        profile = _require_creator_profile(db, current_user)
        kyc = db.query(KYC).filter(KYC.creator_id == profile.id).first()
        if not kyc:
            kyc = KYC(creator_id=profile.id)
            db.add(kyc)
        kyc.document_type = body.document_type.upper()
        kyc.document_front_url = body.front_image_url
        kyc.document_back_url = body.back_image_url
        # resubmission resets any earlier review
        kyc.status = "pending"
        kyc.submitted_at = datetime.utcnow()

        db.commit()
        db.refresh(kyc)
        logger.info("KYC submitted for creator %s (%s)", profile.id, kyc.document_type)
        return create_response(
            message="KYC submitted successfully",
            data={"kyc": KycResponse.model_validate(kyc).model_dump()},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to submit KYC")


@router.get("/profile")
def get_full_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        user = (
            db.query(User)
            .options(
                joinedload(User.creator_profile).joinedload(CreatorProfile.kyc),
                joinedload(User.creator_profile).selectinload(CreatorProfile.packages),
                joinedload(User.creator_profile).selectinload(CreatorProfile.portfolio_items),
            )
            .filter(User.id == current_user.id)
            .first()
        )
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        return create_response(
            message="Profile fetched successfully",
            data={"user": UserProfileResponse.model_validate(user).model_dump()},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to get profile")
