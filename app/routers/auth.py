import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.user import AccountResponse, GoogleMobileLogin, SendPhoneCode, UpdateName, VerifyPhoneCode
from app.services.auth_middleware import get_current_user
from app.services.auth_service import create_access_token
from app.services.google_auth_service import GoogleTokenVerifier, get_google_verifier
from app.services.phone_verification_service import complete_phone_login, request_code
from app.services.sms_verification_service import TwilioVerifyProvider, get_verification_provider
from app.utils.response import create_response, handle_exception

router = APIRouter(prefix="/api/auth", tags=["Auth"])
logger = logging.getLogger(__name__)


def _account_payload(user: User) -> dict:
    return AccountResponse(
        id=str(user.id),
        email=user.email,
        name=user.name,
        phone=user.phone,
        profileImage=user.profile_image_url,
        isVerified=bool(user.email_verified or user.phone_verified),
        userType=user.user_type,
        status=user.status,
    ).model_dump()


@router.post("/google-mobile")
def google_mobile_login(
    body: GoogleMobileLogin,
    db: Session = Depends(get_db),
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
):
    try:
        try:
            claims = verifier.verify(body.id_token)
        except ValueError as exc:
            logger.warning("Rejected Google ID token: %s", exc)
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Google token")

        email = claims.get("email")
        if not email:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Google account has no email")
        name = claims.get("name") or email.split("@")[0]
        picture = claims.get("picture")

        user = db.query(User).filter(User.email == email).first()
        if not user:
            user = User(
                email=email,
                name=name,
                profile_image_url=picture,
                auth_provider="google",
                email_verified=True,
                user_type="creator",
                status="active",
                last_login_at=datetime.utcnow(),
            )
            db.add(user)
            logger.info("Creating Google user %s (sub=%s)", email, claims.get("sub"))
        else:
            user.last_login_at = datetime.utcnow()
            user.profile_image_url = picture
            user.email_verified = True

        db.commit()
        db.refresh(user)

        return create_response(
            message="Google authentication successful",
            data={
                "user": {
                    "id": str(user.id),
                    "email": user.email,
                    "name": user.name,
                    "profileImage": user.profile_image_url,
                    "isVerified": user.email_verified,
                },
                "token": create_access_token(user.id),
            },
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Google authentication failed")


@router.post("/send-phone-verification-code")
def send_phone_verification_code(
    body: SendPhoneCode,
    db: Session = Depends(get_db),
    provider: TwilioVerifyProvider | None = Depends(get_verification_provider),
):
    try:
        request_code(db, provider, body.phone)
        return create_response(
            message="Verification code sent successfully",
            data={"success": True, "phone": body.phone},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to send verification code")


@router.post("/verify-phone-code")
def verify_phone_code(
    body: VerifyPhoneCode,
    db: Session = Depends(get_db),
    provider: TwilioVerifyProvider | None = Depends(get_verification_provider),
):
    try:
        user = complete_phone_login(db, provider, body.phone, body.code, body.full_name)
        return create_response(
            message="Phone verification successful",
            data={
                "user": {
                    "id": str(user.id),
                    "phone": user.phone,
                    "name": user.name,
                    "isVerified": user.phone_verified,
                },
                "token": create_access_token(user.id),
            },
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Phone verification failed")


@router.post("/update-name")
def update_name(
    body: UpdateName,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        current_user.name = body.name
        db.commit()
        db.refresh(current_user)
        return create_response(
            message="Name updated successfully",
            data={
                "user": {
                    "id": str(current_user.id),
                    "name": current_user.name,
                    "email": current_user.email,
                    "phone": current_user.phone,
                }
            },
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to update name")


@router.get("/profile")
def get_account(current_user: User = Depends(get_current_user)):
    try:
        return create_response(
            message="Profile fetched successfully",
            data={"user": _account_payload(current_user)},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)
