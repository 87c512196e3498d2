"""Phone number verification with Twilio Verify and a database fallback.

Every send request stores its own 6-digit code. When Twilio is configured,
Twilio delivers and checks its own code and the stored one only matters if a
later Twilio check errors out. Without Twilio the stored code is logged for
development use.
"""

import logging
import secrets
from datetime import datetime, timedelta
from enum import Enum

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.config import settings
from app.models.phone_verification import PhoneVerification
from app.models.user import User
from app.services.sms_verification_service import APPROVED, TwilioVerifyProvider, is_rate_limited

logger = logging.getLogger(__name__)

INVALID_CODE = "Invalid verification code"
INVALID_OR_EXPIRED_CODE = "Invalid or expired verification code"


class DispatchOutcome(str, Enum):
    PROVIDER_SENT = "provider_sent"
    PROVIDER_SKIPPED = "provider_skipped"
    PROVIDER_FAILED = "provider_failed"


class VerificationMethod(str, Enum):
    PROVIDER = "provider"
    LOCAL = "local"


def generate_otp_code() -> str:
    # uniform over [100000, 999999]
    return str(100000 + secrets.randbelow(900000))


def generate_verification_token() -> str:
    return secrets.token_hex(32)


def _cooldown_message(seconds: int) -> str:
    if seconds % 60 == 0:
        minutes = seconds // 60
        unit = "minute" if minutes == 1 else "minutes"
        return f"Please wait {minutes} {unit} before requesting another code"
    return f"Please wait {seconds} seconds before requesting another code"


def ensure_cooldown_elapsed(db: Session, phone: str, now: datetime) -> None:
    window_start = now - timedelta(seconds=settings.OTP_COOLDOWN_SECONDS)
    recent = (
        db.query(PhoneVerification.id)
        .filter(PhoneVerification.phone == phone, PhoneVerification.created_at > window_start)
        .first()
    )
    if recent:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=_cooldown_message(settings.OTP_COOLDOWN_SECONDS),
        )


def _dispatch_code(provider: TwilioVerifyProvider | None, phone: str, code: str) -> DispatchOutcome:
    if provider is None:
        logger.info("OTP for %s: %s (Twilio not configured)", phone, code)
        return DispatchOutcome.PROVIDER_SKIPPED

    try:
        provider.start_verification(phone)
    except Exception as exc:
        if is_rate_limited(exc):
            logger.warning("Twilio rate limit hit for %s. OTP: %s", phone, code)
        else:
            logger.error("SMS sending failed for %s: %s. OTP: %s", phone, exc, code)
        return DispatchOutcome.PROVIDER_FAILED
    return DispatchOutcome.PROVIDER_SENT


def request_code(db: Session, provider: TwilioVerifyProvider | None, phone: str) -> DispatchOutcome:
    """Store a fresh code for ``phone`` and try to deliver it.

    Raises a 429 ``HTTPException`` inside the cooldown window. Delivery
    problems are only logged; the returned outcome says which path ran.
    """
    now = datetime.utcnow()
    ensure_cooldown_elapsed(db, phone, now)

    code = generate_otp_code()
    db.add(
        PhoneVerification(
            phone=phone,
            code=code,
            token=generate_verification_token(),
            created_at=now,
            expires_at=now + timedelta(minutes=settings.OTP_TTL_MINUTES),
        )
    )
    db.commit()

    outcome = _dispatch_code(provider, phone, code)
    logger.info("Verification code dispatch for %s: %s", phone, outcome.value)
    return outcome


def _check_with_provider(provider: TwilioVerifyProvider, phone: str, code: str) -> bool:
    """True when Twilio approved the code, False when Twilio could not be asked."""
    try:
        verification_status = provider.check_verification(phone, code)
    except Exception as exc:
        if is_rate_limited(exc):
            logger.warning("Twilio rate limit hit, falling back to database verification for %s", phone)
        else:
            logger.error("Twilio verification error for %s, falling back to database verification: %s", phone, exc)
        return False

    if verification_status != APPROVED:
        # An explicit verdict from Twilio is final.
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CODE)
    return True


def _check_stored_code(db: Session, phone: str, code: str) -> PhoneVerification:
    now = datetime.utcnow()
    verification = (
        db.query(PhoneVerification)
        .filter(
            PhoneVerification.phone == phone,
            PhoneVerification.code == code,
            PhoneVerification.expires_at > now,
            PhoneVerification.verified_at.is_(None),
        )
        .order_by(PhoneVerification.created_at.desc(), PhoneVerification.id.desc())
        .first()
    )
    if not verification:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_OR_EXPIRED_CODE)
    verification.verified_at = now
    return verification


def verify_code(
    db: Session, provider: TwilioVerifyProvider | None, phone: str, code: str
) -> VerificationMethod:
    if provider is not None and _check_with_provider(provider, phone, code):
        return VerificationMethod.PROVIDER
    _check_stored_code(db, phone, code)
    return VerificationMethod.LOCAL


def upsert_phone_user(db: Session, phone: str, full_name: str | None = None) -> User:
    user = db.query(User).filter(User.phone == phone).first()
    if not user:
        user = User(
            phone=phone,
            phone_verified=True,
            auth_provider="phone",
            user_type="creator",
            status="active",
            name=full_name or "User",
            last_login_at=datetime.utcnow(),
        )
        db.add(user)
        logger.info("Creating user for verified phone %s", phone)
        return user

    user.phone_verified = True
    user.last_login_at = datetime.utcnow()
    if full_name:
        user.name = full_name
    return user


def complete_phone_login(
    db: Session,
    provider: TwilioVerifyProvider | None,
    phone: str,
    code: str,
    full_name: str | None = None,
) -> User:
    method = verify_code(db, provider, phone, code)
    user = upsert_phone_user(db, phone, full_name)
    db.commit()
    db.refresh(user)
    logger.info("Phone %s verified via %s for user %s", phone, method.value, user.id)
    return user
