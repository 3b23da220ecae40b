from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional
from datetime import datetime


class Attachment(BaseModel):
    name: str
    path: str


class ApplicationRead(BaseModel):
    id: int
    user_email: Optional[str] = Field(default=None, serialization_alias="userEmail")
    type: Optional[str] = None
    data: Any = None
    status: Optional[str] = Field(default=None, serialization_alias="paymentStatus")
    payment_status: Optional[str] = Field(default=None, serialization_alias="payment_status")
    submission_time: Optional[datetime] = Field(default=None, serialization_alias="submissionTime")
    bill_amount: Optional[str] = Field(default=None, serialization_alias="billAmount")
    bill_number: Optional[str] = Field(default=None, serialization_alias="billNumber")
    bill_on: Optional[str] = Field(default=None, serialization_alias="billOn")
    bill_attachment: Optional[str] = Field(default=None, serialization_alias="billAttachment")

    model_config = ConfigDict(from_attributes=True)


class ApplicationCreated(BaseModel):
    id: int


class ApplicationPage(BaseModel):
    applications: list[ApplicationRead]
    total_count: int = Field(serialization_alias="totalCount")
    current_page: int = Field(serialization_alias="currentPage")
    total_pages: int = Field(serialization_alias="totalPages")


class CancelRequest(BaseModel):
    application_id: int = Field(alias="applicationId")
    user_email: str = Field(alias="userEmail")

    model_config = ConfigDict(populate_by_name=True)


class StatusUpdate(BaseModel):
    application_id: int = Field(alias="applicationId")
    status: str

    model_config = ConfigDict(populate_by_name=True)


class PaymentStatusUpdate(BaseModel):
    application_id: int = Field(alias="applicationId")
    payment_status: str

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    message: str


class BillingUpdated(MessageResponse):
    bill_attachment: Optional[str] = Field(default=None, serialization_alias="billAttachment")
