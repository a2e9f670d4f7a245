from pydantic import BaseModel
from typing import Optional

class UploadResponse(BaseModel):
    success: bool = True
    url: str
    public_id: str
    format: Optional[str] = None
    bytes: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    created_at: Optional[str] = None
    resource_type: Optional[str] = None

class DeleteResponse(BaseModel):
    success: bool = True
    public_id: str
