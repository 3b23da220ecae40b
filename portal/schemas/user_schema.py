from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class UserLogin(BaseModel):
    full_name: Optional[str] = Field(default=None, alias="fullName")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    email: str

    model_config = ConfigDict(populate_by_name=True)


class UserRead(BaseModel):
    id: int
    full_name: Optional[str] = Field(default=None, serialization_alias="fullName")
    phone_number: Optional[str] = Field(default=None, serialization_alias="phoneNumber")
    email: str
    login_time: Optional[datetime] = Field(default=None, serialization_alias="loginTime")

    model_config = ConfigDict(from_attributes=True)
