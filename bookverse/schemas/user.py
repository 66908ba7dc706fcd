"""
User Pydantic Schemas

Schemas:
- UserCreate: Registration data (email, full name, password)
- UserResponse: The authenticated user's own profile
- UserPublicResponse: What other readers see next to books and reviews
- UserProfileResponse: Public profile page with engagement counts
- TokenResponse / RefreshTokenRequest: JWT exchange

Pydantic v2 Features Used:
- model_config: Configure model behavior
- Field(): Define constraints and metadata
- field_validator: Validate and transform field values
- EmailStr: Built-in email validation
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    """
    Schema for user registration.

    Example request body:
    {
        "email": "jane@example.com",
        "full_name": "Jane Reader",
        "password": "secret123"
    }
    """

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["jane@example.com"],
    )

    full_name: str = Field(
        ...,
        min_length=2,
        max_length=50,
        description="Display name (2-50 characters)",
        examples=["Jane Reader"],
    )

    password: str = Field(
        ...,
        min_length=6,
        max_length=72,  # bcrypt ignores anything past 72 bytes
        description="Password (at least 6 characters, must include a letter and a number)",
        examples=["secret123"],
    )

    @field_validator("full_name")
    @classmethod
    def full_name_must_have_letters(cls, v: str) -> str:
        """Trim the name and require at least one letter."""
        v = v.strip()
        if not re.search(r"[^\W\d_]", v):
            raise ValueError("Name should contain at least some letters")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are stored lowercase so logins are case-insensitive."""
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_must_mix_letters_and_digits(cls, v: str) -> str:
        """Require at least one letter and one number."""
        if not re.search(r"[A-Za-z]", v):
            raise ValueError("Password must contain at least one letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one number")
        return v


class UserResponse(BaseModel):
    """
    Schema for the current user's profile.

    SECURITY: Never includes the password hash.
    """

    id: int = Field(..., description="Unique user identifier", examples=[1, 42])
    email: EmailStr = Field(..., description="User's email address")
    full_name: str = Field(..., description="Display name")
    is_active: bool = Field(..., description="Whether the account is active")
    is_superuser: bool = Field(..., description="Whether the user has admin privileges")
    created_at: datetime = Field(..., description="When the user registered")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "email": "jane@example.com",
                "full_name": "Jane Reader",
                "is_active": True,
                "is_superuser": False,
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class UserPublicResponse(BaseModel):
    """
    Public user profile (visible to other users).

    Excludes email and account status fields.
    """

    id: int = Field(..., description="Unique user identifier")
    full_name: str = Field(..., description="Display name")

    model_config = ConfigDict(from_attributes=True)


class UserProfileResponse(UserPublicResponse):
    """Public profile page: identity plus community engagement."""

    total_books_added: int = Field(..., ge=0, description="Books this reader shared")
    total_reviews_written: int = Field(..., ge=0, description="Reviews this reader wrote")
    reader_level: str = Field(
        ...,
        description="Experience label from combined activity",
        examples=["New Reader", "Book Explorer", "Avid Reader", "Literary Enthusiast"],
    )


class TokenResponse(BaseModel):
    """Access token returned by login and refresh."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Always 'bearer'")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class RefreshTokenRequest(BaseModel):
    """Optional body for /auth/refresh when the cookie isn't available."""

    refresh_token: str | None = Field(
        default=None,
        description="Refresh token issued at login",
    )
