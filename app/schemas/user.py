import re

from pydantic import BaseModel, Field, field_validator

PHONE_PATTERN = re.compile(r"^\+[1-9]\d{7,14}$")
_PHONE_SEPARATORS = re.compile(r"[\s\-().]")


def normalize_phone(value: str) -> str:
    """Strip separators and coerce to E.164 (+ and 8-15 digits)."""
    cleaned = _PHONE_SEPARATORS.sub("", value or "")
    if cleaned and not cleaned.startswith("+"):
        cleaned = "+" + cleaned
    if not PHONE_PATTERN.match(cleaned):
        raise ValueError("Valid phone number is required")
    return cleaned


class GoogleMobileLogin(BaseModel):
    id_token: str = Field(alias="idToken")

    @field_validator("id_token")
    @classmethod
    def validate_id_token(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("ID token is required")
        return value


class SendPhoneCode(BaseModel):
    phone: str

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        return normalize_phone(value)


class VerifyPhoneCode(BaseModel):
    phone: str
    code: str
    full_name: str | None = Field(default=None, alias="fullName")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        return normalize_phone(value)

    @field_validator("code")
    @classmethod
    def validate_code(cls, value: str) -> str:
        value = value.strip()
        if len(value) != 6 or not value.isdigit():
            raise ValueError("6-digit code is required")
        return value

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class UpdateName(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class AccountResponse(BaseModel):
    id: str
    email: str | None
    name: str
    phone: str | None
    profileImage: str | None
    isVerified: bool
    userType: str
    status: str
