from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session
from portal.core.db import get_db
from portal.controllers.operator_controller import (
    list_operator_applications,
    update_status,
    update_payment_status,
    update_billing,
)
from portal.schemas.application_schema import (
    ApplicationPage,
    BillingUpdated,
    MessageResponse,
    PaymentStatusUpdate,
    StatusUpdate,
)

router = APIRouter(prefix="/api/operator", tags=["operator"])


@router.get("/applications", response_model=ApplicationPage)
def list_applications_route(
    page: int = Query(default=1),
    limit: int = Query(default=15),
    search: str = Query(default=""),
    db: Session = Depends(get_db),
):
    return list_operator_applications(db, page, limit, search)


@router.post("/update-status", response_model=MessageResponse)
def update_status_route(payload: StatusUpdate, db: Session = Depends(get_db)):
    return update_status(db, payload.application_id, payload.status)


@router.post("/update-payment-status", response_model=MessageResponse)
def update_payment_status_route(payload: PaymentStatusUpdate, db: Session = Depends(get_db)):
    return update_payment_status(db, payload.application_id, payload.payment_status)


@router.post("/update-billing", response_model=BillingUpdated)
def update_billing_route(
    application_id: int = Form(alias="applicationId"),
    bill_amount: str | None = Form(default=None, alias="billAmount"),
    bill_number: str | None = Form(default=None, alias="billNumber"),
    bill_on: str | None = Form(default=None, alias="billOn"),
    bill_attachment: UploadFile | None = File(default=None, alias="billAttachment"),
    db: Session = Depends(get_db),
):
    return update_billing(db, application_id, bill_amount, bill_number, bill_on, bill_attachment)
