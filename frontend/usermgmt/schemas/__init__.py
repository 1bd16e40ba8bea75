# Schemas package for API payloads and session records

# Base schemas
from .base import BaseSchema, RecordSchema, ApiEnvelope

# User schemas
from .user import (
    UserRecord, UserLogin, UserCreate, UserUpdate, ImageUpload,
    normalize_education, canonical_education,
)

# Session schemas
from .session import SessionStatus, SessionSnapshot

# Export all schemas for easy importing
__all__ = [
    # Base
    "BaseSchema", "RecordSchema", "ApiEnvelope",

    # User
    "UserRecord", "UserLogin", "UserCreate", "UserUpdate", "ImageUpload",
    "normalize_education", "canonical_education",

    # Session
    "SessionStatus", "SessionSnapshot",
]
