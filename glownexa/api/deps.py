import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pymongo.database import Database

from glownexa.database import get_database
from glownexa.core.exceptions import forbidden, unauthorized
from glownexa.core.security import verify_id_token
from glownexa.models.user import CurrentUser

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

def get_db() -> Database:
    return get_database()

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """Any signed-in user, verified email or not"""
    if credentials is None:
        raise unauthorized()

    claims = verify_id_token(credentials.credentials)
    if claims is None:
        logger.error("Token verification failed - invalid or expired token")
        raise unauthorized()

    return CurrentUser(
        uid=claims["uid"],
        email=claims.get("email"),
        email_verified=claims.get("email_verified", False),
        name=claims.get("name"),
    )

async def get_current_active_user(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    if not current_user.email_verified:
        raise forbidden("Please verify your email before continuing.")
    return current_user
