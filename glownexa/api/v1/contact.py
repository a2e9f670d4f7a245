from typing import Optional
import logging

from email_validator import validate_email, EmailNotValidError
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from glownexa.core.config import settings
from glownexa.core.exceptions import MailDeliveryError
from glownexa.core.monitoring import contact_messages_total, contact_rejections_total
from glownexa.core.rate_limit import rate_limit
from glownexa.schemas.contact import ContactRequest, ContactResponse
from glownexa.services.mail_service import mail_service

logger = logging.getLogger(__name__)

router = APIRouter()

contact_rate_limit = rate_limit(
    requests=settings.CONTACT_RATE_LIMIT_REQUESTS,
    window=settings.CONTACT_RATE_LIMIT_WINDOW,
)

def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ContactResponse(success=False, error=error).model_dump(exclude_none=True),
    )

@router.post("/contact", response_model=ContactResponse, response_model_exclude_none=True)
@contact_rate_limit
async def send_contact_message(request: Request, payload: Optional[ContactRequest] = None):
    """Forward a contact form submission to the support inbox"""
    if payload is None or payload.missing_required():
        contact_rejections_total.labels(reason="missing_fields").inc()
        return _failure(status.HTTP_400_BAD_REQUEST, "Missing required fields")

    try:
        # SMTPUTF8 local parts cannot be relayed; IDN domains are sent as punycode
        address = validate_email(
            payload.email.strip(), check_deliverability=False, allow_smtputf8=False
        ).ascii_email
    except EmailNotValidError:
        contact_rejections_total.labels(reason="invalid_email").inc()
        return _failure(status.HTTP_400_BAD_REQUEST, "Invalid email address")

    try:
        await mail_service.send_contact_message(
            name=payload.name.strip(),
            email=address,
            message=payload.message,
            subject=payload.subject_text(),
        )
    except MailDeliveryError:
        contact_messages_total.labels(status="failed").inc()
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to send email")

    contact_messages_total.labels(status="sent").inc()
    return ContactResponse(success=True, message="Email sent")
