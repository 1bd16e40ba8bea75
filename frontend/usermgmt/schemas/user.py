# usermgmt/schemas/user.py
"""
Pydantic schemas for the User record and the forms that create/change it.
"""
from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple
from pydantic import AliasChoices, EmailStr, Field, field_validator

from .base import BaseSchema, RecordSchema

Gender = Literal["male", "female", "other"]


def normalize_education(raw: Any) -> Optional[str]:
    """
    Collapse the education field to a scalar.

    The backend sends either "Bachelor's Degree" or ["Bachelor's Degree"].
    A sequence yields its first element, a string passes through unchanged.
    """
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if raw is None:
        return None
    return raw if isinstance(raw, str) else str(raw)


def canonical_education(raw: Any, options: Sequence[str]) -> Optional[str]:
    """
    Map a stored education value onto the menu of allowed options.

    Matching is case-insensitive and the menu's casing wins. A value with no
    matching option is returned as stored.
    """
    value = normalize_education(raw)
    if value is None:
        return None
    needle = value.strip().lower()
    for option in options:
        if option.lower() == needle:
            return option
    return value


class UserRecord(RecordSchema):
    """
    Identity returned by GET /auth/me.
    Owned by the session controller; views only ever see this frozen copy.
    """
    id: str = Field(
        ...,
        validation_alias=AliasChoices("_id", "id"),
        serialization_alias="_id",
        description="Backend identifier",
    )
    username: str = Field("", description="Display name")
    email: Optional[str] = Field(None, description="Account e-mail")
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    gender: Optional[str] = None
    city: Optional[str] = None
    education: Optional[str] = Field(None, description="Always a scalar after validation")
    images: List[str] = Field(default_factory=list, description="Stored image paths (/uploads/...)")

    @field_validator("education", mode="before")
    @classmethod
    def _scalar_education(cls, v: Any) -> Optional[str]:
        return normalize_education(v)

    @field_validator("images", mode="before")
    @classmethod
    def _images_list(cls, v: Any) -> List[str]:
        return list(v or [])


class UserLogin(BaseSchema):
    """
    Body of POST /auth/login. Shape validation is left to the caller/backend.
    """
    email: str
    password: str


class ImageUpload(RecordSchema):
    """
    One image file attached to a multipart request.
    """
    filename: str
    content: bytes
    content_type: str = "image/jpeg"

    def as_multipart(self) -> Tuple[str, Tuple[str, bytes, str]]:
        # Every file goes under the same "images" field name
        return ("images", (self.filename, self.content, self.content_type))


class _ProfileFields(BaseSchema):
    def to_form_fields(self) -> Dict[str, str]:
        """Wire-named, non-null fields as strings (multipart text parts)."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        return {k: str(v) for k, v in data.items()}


class UserCreate(_ProfileFields):
    """
    Profile fields for POST /auth/register (images travel separately).
    """
    username: str
    email: EmailStr
    password: str
    phone_number: str = Field(..., alias="phoneNumber")
    gender: Gender
    city: str
    education: str

    @field_validator("education", mode="before")
    @classmethod
    def _scalar_education(cls, v: Any) -> Optional[str]:
        return normalize_education(v)


class UserUpdate(_ProfileFields):
    """
    Changed fields for PUT /users/{id}. Unset fields are not sent.
    """
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    gender: Optional[Gender] = None
    city: Optional[str] = None
    education: Optional[str] = None

    @field_validator("education", mode="before")
    @classmethod
    def _scalar_education(cls, v: Any) -> Optional[str]:
        return normalize_education(v)
