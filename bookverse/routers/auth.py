"""
Authentication Router

Handles user authentication endpoints:
- Registration (email/password)
- Login (email/password → JWT tokens)
- Token refresh (refresh token → new access token)
- Get current user (from JWT token)

Security:
=========
- Passwords are hashed with bcrypt before storage
- Plain text passwords are never logged or stored
- Access tokens are short-lived (15 min default)
- Refresh tokens are longer-lived (7 days default) and also set as an
  httpOnly cookie
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select

from bookverse.config import get_settings
from bookverse.dependencies import ActiveUser, DbSession
from bookverse.models.user import User
from bookverse.schemas.user import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
)
from bookverse.services.rate_limiter import limiter
from bookverse.services.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token_type,
)

logger = logging.getLogger(__name__)
settings = get_settings()

REFRESH_COOKIE = "refresh_token"

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"description": "Unauthorized"},
        409: {"description": "Email already registered"},
    },
)


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token({"sub": str(user.id)}),
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,  # Minutes to seconds
    )


# -------------------------------------------------------------------------
# Registration Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a new account with email and password.

    **Password Requirements:**
    - 6 to 72 characters
    - At least 1 letter
    - At least 1 number

    **Name Requirements:**
    - 2-50 characters, must contain letters
    """,
)
@limiter.limit(settings.rate_limit_auth)
def register(
    request: Request,
    user_data: UserCreate,
    db: DbSession,
) -> UserResponse:
    """
    Register a new user with email and password.

    1. Validates email, name and password (handled by Pydantic)
    2. Checks for a duplicate email
    3. Hashes password with bcrypt
    4. Returns user data (without password)
    """
    stmt = select(User).where(User.email == user_data.email)
    if db.execute(stmt).scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    user = User(
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        full_name=user_data.full_name,
        is_active=True,
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"New user registered: {user.email}")

    return UserResponse.model_validate(user)


# -------------------------------------------------------------------------
# Login Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
    description="""
    Authenticate with email and password to receive a JWT access token.

    A refresh token is set as an httpOnly cookie; exchange it at
    `/auth/refresh` for a new access token.

    **Note:** Use the email address in the 'username' field (OAuth2 standard).
    """,
)
@limiter.limit(settings.rate_limit_auth)
def login(
    request: Request,
    response: Response,
    db: DbSession,
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> TokenResponse:
    """
    Authenticate user and return JWT tokens.

    Uses OAuth2 password flow (form data with username/password).
    """
    email = form_data.username.strip().lower()

    stmt = select(User).where(User.email == email)
    user = db.execute(stmt).scalar_one_or_none()

    # Same message for unknown email and wrong password
    if user is None or not verify_password(form_data.password, user.hashed_password):
        logger.warning(f"Login failed for {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        logger.warning(f"Login failed: inactive account {email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    user.last_login_at = datetime.now(UTC)
    db.commit()

    response.set_cookie(
        key=REFRESH_COOKIE,
        value=create_refresh_token({"sub": str(user.id)}),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
    )

    logger.info(f"User logged in: {user.email}")

    return _token_response(user)


# -------------------------------------------------------------------------
# Token Refresh Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh access token",
    description="""
    Get a new access token using a refresh token, taken from the request
    body if present, otherwise from the httpOnly cookie set at login.
    """,
)
def refresh_token(
    request: Request,
    db: DbSession,
    body: RefreshTokenRequest | None = None,
) -> TokenResponse:
    """Exchange a refresh token for a new access token."""
    token = body.refresh_token if body and body.refresh_token else None
    if token is None:
        token = request.cookies.get(REFRESH_COOKIE)

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token_type(token, "refresh")
    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.get(User, int(payload["sub"]))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    logger.info(f"Token refreshed for user: {user.email}")

    return _token_response(user)


# -------------------------------------------------------------------------
# Get Current User Endpoint
# -------------------------------------------------------------------------
@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Get the currently authenticated user's profile.",
)
def get_me(current_user: ActiveUser) -> UserResponse:
    """Return the current authenticated user's profile."""
    return UserResponse.model_validate(current_user)
