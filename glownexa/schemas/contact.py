from pydantic import BaseModel
from typing import Any, Optional

class ContactRequest(BaseModel):
    # Untyped so wrong JSON types reach the route and get the relay's own 400
    name: Any = None
    email: Any = None
    subject: Any = None
    message: Any = None

    def missing_required(self) -> bool:
        return not all(
            isinstance(value, str) and value.strip()
            for value in (self.name, self.email, self.message)
        )

    def subject_text(self) -> Optional[str]:
        return self.subject if isinstance(self.subject, str) else None

class ContactResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
