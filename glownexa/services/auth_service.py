"""
Identity Service
Account flows against the Firebase Identity Toolkit REST API
"""
import httpx
from typing import Dict, Any, Optional
import logging

from fastapi import status

from glownexa.core.config import settings
from glownexa.core.exceptions import AuthProviderError

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

LOGIN_ERRORS = {
    "EMAIL_NOT_FOUND": ("No account found with this email address.", status.HTTP_401_UNAUTHORIZED),
    "INVALID_PASSWORD": ("Incorrect password. Please try again.", status.HTTP_401_UNAUTHORIZED),
    "INVALID_EMAIL": ("Please enter a valid email address.", status.HTTP_400_BAD_REQUEST),
    "USER_DISABLED": ("This account has been disabled.", status.HTTP_403_FORBIDDEN),
    "TOO_MANY_ATTEMPTS_TRY_LATER": ("Too many failed attempts. Please try again later.", status.HTTP_429_TOO_MANY_REQUESTS),
    "INVALID_LOGIN_CREDENTIALS": ("Invalid email or password. Please check your credentials.", status.HTTP_401_UNAUTHORIZED),
}
LOGIN_DEFAULT = "Login failed. Please try again."

REGISTER_ERRORS = {
    "EMAIL_EXISTS": ("This email is already registered. Please use a different email or try logging in.", status.HTTP_409_CONFLICT),
    "WEAK_PASSWORD": ("Password is too weak. Please choose a stronger password.", status.HTTP_400_BAD_REQUEST),
    "INVALID_EMAIL": ("Please enter a valid email address.", status.HTTP_400_BAD_REQUEST),
}
REGISTER_DEFAULT = "Registration failed. Please try again."

RESET_ERRORS = {
    "EMAIL_NOT_FOUND": ("No account found with this email address.", status.HTTP_404_NOT_FOUND),
    "INVALID_EMAIL": ("Please enter a valid email address.", status.HTTP_400_BAD_REQUEST),
    "TOO_MANY_ATTEMPTS_TRY_LATER": ("Too many requests. Please try again later.", status.HTTP_429_TOO_MANY_REQUESTS),
}
RESET_DEFAULT = "Failed to send reset email. Please try again."

VERIFY_DEFAULT = "Failed to verify email. The link may be expired or invalid."
RESEND_DEFAULT = "Failed to send verification email. Please try again."

UNVERIFIED_EMAIL = "Please verify your email before logging in. Check your inbox for verification link."


def extract_error_code(payload: Any) -> str:
    """
    Pull the provider code out of an error body.

    Messages look like "WEAK_PASSWORD : Password should be at least 6 characters".
    """
    try:
        message = payload["error"]["message"]
    except (KeyError, TypeError):
        return "UNKNOWN"
    return message.split(":")[0].strip() or "UNKNOWN"


def map_error(code: str, table: Dict[str, tuple], default: str) -> AuthProviderError:
    message, status_code = table.get(code, (default, status.HTTP_400_BAD_REQUEST))
    return AuthProviderError(code=code, message=message, status_code=status_code)


class AuthService:
    """Registration, login and account emails for the identity provider"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client

    def _http(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=10.0)
        return self.client

    async def _call(
        self,
        endpoint: str,
        body: Dict[str, Any],
        errors: Dict[str, tuple],
        default: str,
    ) -> Dict[str, Any]:
        if not settings.FIREBASE_API_KEY:
            logger.error("FIREBASE_API_KEY is not configured")
            raise AuthProviderError("CONFIGURATION", default, status.HTTP_503_SERVICE_UNAVAILABLE)

        url = f"{IDENTITY_TOOLKIT_URL}/{endpoint}"
        try:
            response = await self._http().post(url, params={"key": settings.FIREBASE_API_KEY}, json=body)
        except httpx.HTTPError as e:
            logger.error(f"Identity provider unreachable ({endpoint}): {e}")
            raise AuthProviderError("UNAVAILABLE", default, status.HTTP_503_SERVICE_UNAVAILABLE) from e

        if response.status_code != 200:
            try:
                code = extract_error_code(response.json())
            except ValueError:
                code = "UNKNOWN"
            logger.warning(f"Identity provider rejected {endpoint}: {code}")
            raise map_error(code, errors, default)

        return response.json()

    async def register(self, email: str, password: str) -> Dict[str, Any]:
        """Create the account and send the verification email"""
        account = await self._call(
            "accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
            REGISTER_ERRORS,
            REGISTER_DEFAULT,
        )
        logger.info(f"Registered account {account.get('localId')}")

        try:
            await self.send_verification_email(account["idToken"])
        except AuthProviderError as e:
            # The account exists; the user can ask for another link later
            logger.error(f"Verification email failed for {account.get('localId')}: {e.code}")

        return account

    async def send_verification_email(self, id_token: str) -> None:
        await self._call(
            "accounts:sendOobCode",
            {
                "requestType": "VERIFY_EMAIL",
                "idToken": id_token,
                "continueUrl": settings.EMAIL_VERIFICATION_CONTINUE_URL,
            },
            {},
            RESEND_DEFAULT,
        )

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Password sign-in; only verified addresses get tokens"""
        session = await self._call(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
            LOGIN_ERRORS,
            LOGIN_DEFAULT,
        )

        lookup = await self._call(
            "accounts:lookup",
            {"idToken": session["idToken"]},
            LOGIN_ERRORS,
            LOGIN_DEFAULT,
        )
        users = lookup.get("users") or [{}]
        if not users[0].get("emailVerified", False):
            raise AuthProviderError("EMAIL_NOT_VERIFIED", UNVERIFIED_EMAIL, status.HTTP_403_FORBIDDEN)

        logger.info(f"User {session.get('localId')} logged in successfully")
        return session

    async def send_password_reset(self, email: str) -> None:
        await self._call(
            "accounts:sendOobCode",
            {"requestType": "PASSWORD_RESET", "email": email},
            RESET_ERRORS,
            RESET_DEFAULT,
        )
        logger.info("Password reset email sent")

    async def verify_email(self, oob_code: str) -> Dict[str, Any]:
        """Apply the action code from the verification link"""
        return await self._call(
            "accounts:update",
            {"oobCode": oob_code},
            {},
            VERIFY_DEFAULT,
        )


auth_service = AuthService()
