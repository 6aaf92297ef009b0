"""Account data models and request schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from applytrack.tracker.models import format_datetime, parse_datetime
from applytrack.tracker.schemas import EMAIL_PATTERN, JobUrl

Name = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]
Password = Annotated[str, StringConstraints(min_length=8, max_length=128)]


@dataclass
class User:
    """An account as exposed to its owner (never carries the password hash)."""

    id: str
    email: str
    created_at: datetime
    updated_at: datetime
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    resume_url: str | None = None
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    address_zip: str | None = None
    address_country: str | None = None
    education: list[dict[str, Any]] = field(default_factory=list)
    experience: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "resume_url": self.resume_url,
            "address_street": self.address_street,
            "address_city": self.address_city,
            "address_state": self.address_state,
            "address_zip": self.address_zip,
            "address_country": self.address_country,
            "education": list(self.education),
            "experience": list(self.experience),
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=data["id"],
            email=data["email"],
            created_at=parse_datetime(data["created_at"]),
            updated_at=parse_datetime(data["updated_at"]),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            phone=data.get("phone"),
            resume_url=data.get("resume_url"),
            address_street=data.get("address_street"),
            address_city=data.get("address_city"),
            address_state=data.get("address_state"),
            address_zip=data.get("address_zip"),
            address_country=data.get("address_country"),
            education=list(data.get("education") or []),
            experience=list(data.get("experience") or []),
        )


@dataclass
class AuthResponse:
    """Issued on successful registration or login."""

    user: User
    token: str
    expires_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.to_dict(),
            "token": self.token,
            "expires_at": format_datetime(self.expires_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthResponse:
        return cls(
            user=User.from_dict(data["user"]),
            token=data["token"],
            expires_at=parse_datetime(data["expires_at"]),
        )


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("value is not a valid email address")
    return value


class RegisterRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(max_length=254)
    password: Password
    first_name: Name | None = None
    last_name: Name | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(max_length=254)
    password: str = Field(max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)


class EducationEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    institution: str = Field(max_length=200)
    degree: str = Field(max_length=100)
    field_of_study: str | None = Field(default=None, max_length=100)
    start_date: str | None = None
    end_date: str | None = None


class ExperienceEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    company: str = Field(max_length=200)
    title: str = Field(max_length=200)
    location: str | None = Field(default=None, max_length=200)
    start_date: str | None = None
    end_date: str | None = None
    description: str | None = Field(default=None, max_length=2000)


class ProfileUpdate(BaseModel):
    """Partial profile update. The email address is not editable here."""

    model_config = ConfigDict(extra="forbid")

    first_name: Name | None = None
    last_name: Name | None = None
    phone: str | None = Field(default=None, max_length=20)
    resume_url: JobUrl | None = None
    address_street: str | None = Field(default=None, max_length=200)
    address_city: str | None = Field(default=None, max_length=100)
    address_state: str | None = Field(default=None, max_length=100)
    address_zip: str | None = Field(default=None, max_length=20)
    address_country: str | None = Field(default=None, max_length=100)
    education: list[EducationEntry] | None = Field(default=None, max_length=20)
    experience: list[ExperienceEntry] | None = Field(default=None, max_length=20)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class PasswordChange(BaseModel):
    model_config = ConfigDict(extra="forbid")

    current_password: str = Field(max_length=128)
    new_password: Password
