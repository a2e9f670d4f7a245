from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from pymongo.database import Database
from pymongo.errors import PyMongoError
from typing import Optional
import logging

from glownexa.api.deps import get_db, get_current_user, security
from glownexa.core.config import settings
from glownexa.core.exceptions import AuthProviderError, unauthorized
from glownexa.core.rate_limit import rate_limit
from glownexa.database import USERS
from glownexa.models.user import CurrentUser, UserModel
from glownexa.schemas.user import (
    UserCreate, UserLogin, PasswordReset, EmailVerification,
    UserResponse, TokenResponse, MessageResponse
)
from glownexa.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()

auth_rate_limit = rate_limit(
    requests=settings.AUTH_RATE_LIMIT_REQUESTS,
    window=settings.AUTH_RATE_LIMIT_WINDOW,
)

def _http_error(exc: AuthProviderError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@auth_rate_limit
async def register(request: Request, user_in: UserCreate, db: Database = Depends(get_db)):
    """Create an account, store the profile and send the verification email"""
    try:
        account = await auth_service.register(user_in.email, user_in.password)
    except AuthProviderError as e:
        raise _http_error(e)

    user = UserModel(uid=account["localId"], username=user_in.username, email=user_in.email)
    try:
        db[USERS].update_one({"uid": user.uid}, {"$setOnInsert": user.model_dump()}, upsert=True)
    except PyMongoError as e:
        # The account already exists at the provider; the profile is best effort
        logger.error(f"Failed to store profile for {user.uid}: {e}")

    logger.info(f"User {user.uid} registered successfully")
    return UserResponse(uid=user.uid, username=user.username, email=user.email)

@router.post("/login", response_model=TokenResponse)
@auth_rate_limit
async def login(request: Request, credentials: UserLogin):
    """Sign in with email and password; unverified emails are refused"""
    try:
        session = await auth_service.login(credentials.email, credentials.password)
    except AuthProviderError as e:
        raise _http_error(e)

    return TokenResponse(
        id_token=session["idToken"],
        refresh_token=session["refreshToken"],
        expires_in=int(session.get("expiresIn", 3600)),
        uid=session["localId"],
        email=session.get("email"),
    )

@router.post("/password-reset", response_model=MessageResponse)
@auth_rate_limit
async def password_reset(request: Request, reset: PasswordReset):
    try:
        await auth_service.send_password_reset(reset.email)
    except AuthProviderError as e:
        raise _http_error(e)

    return MessageResponse(message="Password reset email sent! Please check your inbox and spam folder.")

@router.post("/verify-email", response_model=MessageResponse)
@auth_rate_limit
async def verify_email(request: Request, verification: EmailVerification):
    try:
        await auth_service.verify_email(verification.oob_code)
    except AuthProviderError as e:
        raise _http_error(e)

    return MessageResponse(message="Your email has been verified successfully!")

@router.post("/resend-verification", response_model=MessageResponse)
@auth_rate_limit
async def resend_verification(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
):
    """Send a fresh verification link to a signed-in, unverified user"""
    if current_user.email_verified:
        return MessageResponse(message="Your email is already verified.")

    if credentials is None:
        raise unauthorized()

    try:
        await auth_service.send_verification_email(credentials.credentials)
    except AuthProviderError as e:
        raise _http_error(e)

    return MessageResponse(message="Verification email sent! Please check your inbox.")
