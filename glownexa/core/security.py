from typing import Any, Dict, Optional
import logging

import firebase_admin
from firebase_admin import auth as firebase_auth, credentials

from glownexa.core.config import settings

logger = logging.getLogger(__name__)

_firebase_app: Optional[firebase_admin.App] = None

def get_firebase_app() -> firebase_admin.App:
    """Initialize the Firebase Admin SDK once per process"""
    global _firebase_app

    if _firebase_app is None:
        options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
        if settings.FIREBASE_SERVICE_ACCOUNT_PATH:
            cred = credentials.Certificate(settings.FIREBASE_SERVICE_ACCOUNT_PATH)
            _firebase_app = firebase_admin.initialize_app(cred, options)
        else:
            # ID token checks only need the project id and Google's public certs
            _firebase_app = firebase_admin.initialize_app(options=options)
        logger.info("Firebase Admin SDK initialized successfully")

    return _firebase_app

def verify_id_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the decoded claims of a Firebase ID token, or None if it is not valid"""
    try:
        return firebase_auth.verify_id_token(token, app=get_firebase_app())
    except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError,
            firebase_auth.RevokedIdTokenError, firebase_auth.CertificateFetchError) as e:
        logger.warning(f"ID token verification failed: {e}")
        return None
