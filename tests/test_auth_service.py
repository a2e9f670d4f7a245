import json

import httpx
import pytest

from glownexa.core.config import settings
from glownexa.core.exceptions import AuthProviderError
from glownexa.services.auth_service import AuthService, extract_error_code

def provider_error(message):
    return httpx.Response(400, json={"error": {"code": 400, "message": message}})

class FakeIdentityToolkit:
    """Routes Identity Toolkit calls by endpoint and records them"""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def __call__(self, request):
        endpoint = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content)
        self.calls.append((endpoint, body, request.url.params.get("key")))
        return self.responses[endpoint]

def make_service(responses):
    toolkit = FakeIdentityToolkit(responses)
    client = httpx.AsyncClient(transport=httpx.MockTransport(toolkit))
    return AuthService(client=client), toolkit

class TestErrorCodes:
    def test_code_with_detail(self):
        payload = {"error": {"message": "WEAK_PASSWORD : Password should be at least 6 characters"}}
        assert extract_error_code(payload) == "WEAK_PASSWORD"

    def test_plain_code(self):
        assert extract_error_code({"error": {"message": "EMAIL_EXISTS"}}) == "EMAIL_EXISTS"

    @pytest.mark.parametrize("payload", [{}, None, {"error": {}}, {"error": {"message": ""}}])
    def test_unknown(self, payload):
        assert extract_error_code(payload) == "UNKNOWN"

class TestRegister:
    @pytest.mark.asyncio
    async def test_sends_verification_email(self):
        service, toolkit = make_service({
            "accounts:signUp": httpx.Response(200, json={"localId": "uid-1", "idToken": "id-token", "email": "a@example.com"}),
            "accounts:sendOobCode": httpx.Response(200, json={"email": "a@example.com"}),
        })

        account = await service.register("a@example.com", "Str0ng!pass")

        assert account["localId"] == "uid-1"
        endpoint, body, key = toolkit.calls[1]
        assert endpoint == "accounts:sendOobCode"
        assert body["requestType"] == "VERIFY_EMAIL"
        assert body["idToken"] == "id-token"
        assert body["continueUrl"] == settings.EMAIL_VERIFICATION_CONTINUE_URL
        assert key == "test-api-key"

    @pytest.mark.asyncio
    async def test_verification_failure_keeps_account(self):
        service, _ = make_service({
            "accounts:signUp": httpx.Response(200, json={"localId": "uid-1", "idToken": "id-token"}),
            "accounts:sendOobCode": provider_error("TOO_MANY_ATTEMPTS_TRY_LATER"),
        })

        account = await service.register("a@example.com", "Str0ng!pass")

        assert account["localId"] == "uid-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message,status_code,text", [
        ("EMAIL_EXISTS", 409, "This email is already registered. Please use a different email or try logging in."),
        ("WEAK_PASSWORD : Password should be at least 6 characters", 400, "Password is too weak. Please choose a stronger password."),
        ("SOMETHING_NEW", 400, "Registration failed. Please try again."),
    ])
    async def test_error_mapping(self, message, status_code, text):
        service, _ = make_service({"accounts:signUp": provider_error(message)})

        with pytest.raises(AuthProviderError) as exc_info:
            await service.register("a@example.com", "Str0ng!pass")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.message == text

class TestLogin:
    SESSION = {"localId": "uid-1", "idToken": "id-token", "refreshToken": "refresh", "expiresIn": "3600", "email": "a@example.com"}

    @pytest.mark.asyncio
    async def test_verified_login(self):
        service, _ = make_service({
            "accounts:signInWithPassword": httpx.Response(200, json=self.SESSION),
            "accounts:lookup": httpx.Response(200, json={"users": [{"localId": "uid-1", "emailVerified": True}]}),
        })

        session = await service.login("a@example.com", "Str0ng!pass")

        assert session["idToken"] == "id-token"

    @pytest.mark.asyncio
    async def test_unverified_email_is_refused(self):
        service, _ = make_service({
            "accounts:signInWithPassword": httpx.Response(200, json=self.SESSION),
            "accounts:lookup": httpx.Response(200, json={"users": [{"localId": "uid-1", "emailVerified": False}]}),
        })

        with pytest.raises(AuthProviderError) as exc_info:
            await service.login("a@example.com", "Str0ng!pass")

        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "EMAIL_NOT_VERIFIED"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code,status_code", [
        ("EMAIL_NOT_FOUND", 401),
        ("INVALID_PASSWORD", 401),
        ("INVALID_LOGIN_CREDENTIALS", 401),
        ("USER_DISABLED", 403),
        ("TOO_MANY_ATTEMPTS_TRY_LATER", 429),
    ])
    async def test_error_mapping(self, code, status_code):
        service, _ = make_service({"accounts:signInWithPassword": provider_error(code)})

        with pytest.raises(AuthProviderError) as exc_info:
            await service.login("a@example.com", "wrong")

        assert exc_info.value.status_code == status_code

class TestAccountEmails:
    @pytest.mark.asyncio
    async def test_password_reset(self):
        service, toolkit = make_service({"accounts:sendOobCode": httpx.Response(200, json={})})

        await service.send_password_reset("a@example.com")

        assert toolkit.calls[0][1] == {"requestType": "PASSWORD_RESET", "email": "a@example.com"}

    @pytest.mark.asyncio
    async def test_password_reset_unknown_email(self):
        service, _ = make_service({"accounts:sendOobCode": provider_error("EMAIL_NOT_FOUND")})

        with pytest.raises(AuthProviderError) as exc_info:
            await service.send_password_reset("nobody@example.com")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "No account found with this email address."

    @pytest.mark.asyncio
    async def test_verify_email_failure(self):
        service, _ = make_service({"accounts:update": provider_error("INVALID_OOB_CODE")})

        with pytest.raises(AuthProviderError) as exc_info:
            await service.verify_email("bad-code")

        assert exc_info.value.message == "Failed to verify email. The link may be expired or invalid."

class TestProviderAvailability:
    @pytest.mark.asyncio
    async def test_missing_api_key(self, monkeypatch):
        monkeypatch.setattr(settings, "FIREBASE_API_KEY", None)
        service, toolkit = make_service({})

        with pytest.raises(AuthProviderError) as exc_info:
            await service.send_password_reset("a@example.com")

        assert exc_info.value.status_code == 503
        assert toolkit.calls == []

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def unreachable(request):
            raise httpx.ConnectTimeout("timed out")

        service = AuthService(client=httpx.AsyncClient(transport=httpx.MockTransport(unreachable)))

        with pytest.raises(AuthProviderError) as exc_info:
            await service.login("a@example.com", "Str0ng!pass")

        assert exc_info.value.status_code == 503
