from pydantic import BaseModel, EmailStr, Field, GetJsonSchemaHandler
from pydantic_core import core_schema
from pydantic.json_schema import JsonSchemaValue
from typing import Any, Optional
from datetime import datetime
from bson import ObjectId

from glownexa.utils.date_utils import get_utc_now

class PyObjectId(ObjectId):
    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: Any
    ) -> core_schema.CoreSchema:
        return core_schema.with_info_plain_validator_function(cls.validate)

    @classmethod
    def validate(cls, v: Any, _: Any) -> ObjectId:
        if isinstance(v, ObjectId):
            return v
        if isinstance(v, str) and ObjectId.is_valid(v):
            return ObjectId(v)
        raise ValueError("Invalid ObjectId")

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        json_schema = handler(core_schema)
        json_schema.update(type="string")
        return json_schema

class UserModel(BaseModel):
    """Profile document stored next to the identity provider account"""
    model_config = {
        "arbitrary_types_allowed": True,
        "populate_by_name": True,
    }

    uid: str  # identity provider user id
    username: str
    email: EmailStr
    created_at: datetime = Field(default_factory=get_utc_now)

class CurrentUser(BaseModel):
    """Claims of a verified ID token"""
    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    name: Optional[str] = None
