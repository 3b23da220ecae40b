import math
import logging
from sqlalchemy.orm import Session
from fastapi import HTTPException, UploadFile, status
from portal.controllers.file_controller import save_upload
from portal.repositories.application_repo import search_applications, update_application_fields
from portal.schemas.application_schema import ApplicationPage, ApplicationRead

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 15


def list_operator_applications(db: Session, page: int | None, limit: int | None, search: str | None) -> ApplicationPage:
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = limit if limit and limit > 0 else DEFAULT_LIMIT
    search = search or ""

    rows, total = search_applications(db, search, offset=(page - 1) * limit, limit=limit)
    return ApplicationPage(
        applications=[ApplicationRead.model_validate(r) for r in rows],
        total_count=total,
        current_page=page,
        total_pages=math.ceil(total / limit),
    )


def _update_or_404(db: Session, application_id: int, **values):
    if not update_application_fields(db, application_id, **values):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")


def update_status(db: Session, application_id: int, new_status: str):
    # No check against WorkflowStatus here; the dashboard only offers valid choices.
    _update_or_404(db, application_id, status=new_status)
    logger.info("Application %s status set to %s", application_id, new_status)
    return {"message": "Status updated successfully"}


def update_payment_status(db: Session, application_id: int, new_payment_status: str):
    _update_or_404(db, application_id, payment_status=new_payment_status)
    logger.info("Application %s payment status set to %s", application_id, new_payment_status)
    return {"message": "Payment status updated successfully"}


def update_billing(
    db: Session,
    application_id: int,
    bill_amount: str | None,
    bill_number: str | None,
    bill_on: str | None,
    attachment: UploadFile | None = None,
):
    values = {"bill_amount": bill_amount, "bill_number": bill_number, "bill_on": bill_on}
    bill_attachment = None
    if attachment is not None and attachment.filename:
        bill_attachment = save_upload(attachment)
        values["bill_attachment"] = bill_attachment

    _update_or_404(db, application_id, **values)
    logger.info("Billing updated for application %s", application_id)
    return {"message": "Billing updated successfully", "bill_attachment": bill_attachment}
