from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

GenderEnum = Literal["Male", "Female", "Other"]
MediaTypeEnum = Literal["image", "video", "archive", "document"]
DocumentTypeEnum = Literal["aadhaar", "pan"]


def _require_text(value: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value


class BasicInfoUpdate(BaseModel):
    gender: GenderEnum
    email: EmailStr
    dob: date
    state: str
    city: str
    pincode: str

    @field_validator("dob", mode="before")
    @classmethod
    def parse_dob(cls, value):
        if isinstance(value, date):
            return value
        text = _require_text(str(value) if value is not None else "", "Date of birth")
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            raise ValueError("Date of birth must be an ISO date (YYYY-MM-DD)")

    @field_validator("state")
    @classmethod
    def validate_state(cls, value: str) -> str:
        return _require_text(value, "State")

    @field_validator("city")
    @classmethod
    def validate_city(cls, value: str) -> str:
        return _require_text(value, "City")

    @field_validator("pincode")
    @classmethod
    def validate_pincode(cls, value: str) -> str:
        return _require_text(value, "Pincode")


class PreferencesUpdate(BaseModel):
    categories: list[str] = Field(min_length=1, max_length=5)
    about: str
    languages: list[str] = Field(min_length=1)

    @field_validator("about")
    @classmethod
    def validate_about(cls, value: str) -> str:
        return _require_text(value, "About")


class PackageCreate(BaseModel):
    platform: str
    content_type: str = Field(alias="contentType")
    quantity: int = Field(ge=1)
    revisions: int = Field(ge=0)
    duration1: str
    duration2: str
    price: float = Field(ge=0)
    description: str | None = None

    @field_validator("platform")
    @classmethod
    def validate_platform(cls, value: str) -> str:
        return _require_text(value, "Platform")

    @field_validator("content_type")
    @classmethod
    def validate_content_type(cls, value: str) -> str:
        return _require_text(value, "Content type")

    @field_validator("duration1", "duration2")
    @classmethod
    def validate_duration(cls, value: str, info) -> str:
        label = "Duration 1" if info.field_name == "duration1" else "Duration 2"
        return _require_text(value, label)


class PortfolioCreate(BaseModel):
    media_url: str = Field(alias="mediaUrl")
    media_type: MediaTypeEnum = Field(alias="mediaType")
    file_name: str = Field(alias="fileName")
    file_size: int = Field(alias="fileSize", ge=1)
    mime_type: str | None = Field(default=None, alias="mimeType")

    @field_validator("media_url")
    @classmethod
    def validate_media_url(cls, value: str) -> str:
        return _require_text(value, "Media URL")

    @field_validator("file_name")
    @classmethod
    def validate_file_name(cls, value: str) -> str:
        return _require_text(value, "File name")


class KycSubmit(BaseModel):
    document_type: DocumentTypeEnum = Field(alias="documentType")
    front_image_url: str = Field(alias="frontImageUrl")
    back_image_url: str = Field(alias="backImageUrl")

    @field_validator("front_image_url")
    @classmethod
    def validate_front(cls, value: str) -> str:
        return _require_text(value, "Front image URL")

    @field_validator("back_image_url")
    @classmethod
    def validate_back(cls, value: str) -> str:
        return _require_text(value, "Back image URL")


class PackageResponse(BaseModel):
    id: int
    creator_id: int
    package_type: str
    title: str
    description: str | None
    platform: str
    content_type: str
    quantity: int
    revisions: int
    duration: str | None
    price: float
    currency: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class PortfolioItemResponse(BaseModel):
    id: int
    creator_id: int
    media_type: str
    media_url: str
    title: str | None
    description: str | None
    file_size: int | None
    mime_type: str | None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class KycResponse(BaseModel):
    id: int
    creator_id: int
    document_type: str
    document_front_url: str
    document_back_url: str
    status: str
    submitted_at: datetime | None

    model_config = {"from_attributes": True}


class CreatorProfileResponse(BaseModel):
    id: int
    user_id: int
    gender: str | None
    date_of_birth: date | None
    location_state: str | None
    location_city: str | None
    location_pincode: str | None
    bio: str | None
    content_categories: list[str] | None
    interests: list[str] | None
    updated_at: datetime

    model_config = {"from_attributes": True}


class CreatorProfileDetail(CreatorProfileResponse):
    kyc: KycResponse | None = None
    packages: list[PackageResponse] = []
    portfolio_items: list[PortfolioItemResponse] = []


class UserProfileResponse(BaseModel):
    id: int
    email: str | None
    phone: str | None
    name: str
    profile_image_url: str | None
    auth_provider: str | None
    email_verified: bool
    phone_verified: bool
    user_type: str
    status: str
    onboarding_step: int
    last_login_at: datetime | None
    created_at: datetime
    creator_profile: CreatorProfileDetail | None = None

    model_config = {"from_attributes": True}
