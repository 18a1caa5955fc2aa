"""Authentication route handlers."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.api.routes import limiter, INVALID_CREDENTIALS_RESPONSE
from liprobakin.database.db import get_db_session
from liprobakin.services import auth_service, user_service, admin_service
from liprobakin.api.auth_dependencies import get_current_user
from liprobakin.models.schemas import (
    SignupRequest,
    LoginRequest,
    AuthResponse,
    UserResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
)
from liprobakin.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)
router = APIRouter()


async def _issue_tokens(session: AsyncSession, user: dict, is_admin: bool) -> AuthResponse:
    access_token = auth_service.create_access_token(data={"user_id": user["id"], "email": user["email"]})
    refresh_token = auth_service.generate_refresh_token()
    expires_at = utcnow() + timedelta(days=auth_service.REFRESH_TOKEN_EXPIRATION_DAYS)
    await user_service.create_refresh_token(session, user["id"], refresh_token, expires_at)
    return AuthResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        user_id=user["id"],
        email=user["email"],
        is_admin=is_admin,
    )


@router.post("/api/auth/signup", response_model=AuthResponse)
@limiter.limit("10/minute")
async def signup(request: Request, payload: SignupRequest, session: AsyncSession = Depends(get_db_session)):
    """
    Create an account. First and last name become the account's identity
    and are not changed afterwards.
    """
    try:
        email = auth_service.normalize_email(payload.email)
        auth_service.validate_password(payload.password)
        if await user_service.get_user_by_email(session, email):
            raise HTTPException(status_code=400, detail="Email is already registered")

        user_id = await user_service.create_user(
            session,
            email=email,
            password_hash=auth_service.hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone_number=payload.phone_number,
        )
        user = await user_service.get_user_by_id(session, user_id)
        logger.info(f"New account created: {email}")
        return await _issue_tokens(session, user, is_admin=False)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error during signup: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error during signup")


@router.post("/api/auth/login", response_model=AuthResponse)
@limiter.limit("10/minute")
async def login(request: Request, payload: LoginRequest, session: AsyncSession = Depends(get_db_session)):
    """Login with email and password. Admin sign-ins are stamped on the admin record."""
    try:
        email = auth_service.normalize_email(payload.email)
        user = await user_service.get_user_by_email(session, email)
        if not user or not auth_service.verify_password(payload.password, user["password_hash"]):
            raise INVALID_CREDENTIALS_RESPONSE

        admin = await admin_service.get_admin_by_user_id(session, user["id"])
        if admin is not None:
            if not admin.get("is_active", True):
                raise HTTPException(status_code=403, detail="Admin account is deactivated")
            await admin_service.record_login(session, user["id"])

        return await _issue_tokens(session, user, is_admin=admin is not None)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error during login: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error during login")


@router.post("/api/auth/refresh", response_model=RefreshTokenResponse)
async def refresh_token(payload: RefreshTokenRequest, session: AsyncSession = Depends(get_db_session)):
    """Exchange a refresh token for a new access token."""
    try:
        token = await user_service.get_refresh_token(session, payload.refresh_token)
        if token is None:
            raise HTTPException(status_code=401, detail="Invalid refresh token")
        if token["is_expired"]:
            await user_service.delete_refresh_token(session, payload.refresh_token)
            raise HTTPException(status_code=401, detail="Refresh token has expired")

        user = await user_service.get_user_by_id(session, token["user_id"])
        if user is None:
            raise HTTPException(status_code=401, detail="User not found")

        access_token = auth_service.create_access_token(data={"user_id": user["id"], "email": user["email"]})
        return RefreshTokenResponse(access_token=access_token, token_type="bearer")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error refreshing token: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error refreshing token")


@router.get("/api/auth/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Current user's account and profile."""
    return UserResponse(**{k: v for k, v in user.items() if k in UserResponse.model_fields})
