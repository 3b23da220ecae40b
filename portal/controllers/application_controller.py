import json
import logging
from sqlalchemy.orm import Session
from fastapi import HTTPException, UploadFile, status
from portal.controllers.file_controller import save_upload
from portal.models.enums import WorkflowStatus
from portal.repositories.application_repo import (
    create_application,
    get_user_application,
    list_applications_by_user,
    cancel_application,
)

logger = logging.getLogger(__name__)


def _parse_form_data(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        document = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="data must be valid JSON")
    if not isinstance(document, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="data must be a JSON object")
    return document


def submit_application(
    db: Session,
    user_email: str | None,
    type: str | None,
    data: str | None,
    attachments: list[UploadFile] | None = None,
):
    if not user_email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userEmail is required")
    if not type:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="type is required")
    document = _parse_form_data(data)

    # Files go to disk before the insert; a failed insert leaves them behind.
    uploaded = [
        {"name": upload.filename or "file", "path": save_upload(upload)}
        for upload in attachments or []
        if upload.filename
    ]
    if uploaded:
        existing = document.get("attachments")
        document["attachments"] = (existing if isinstance(existing, list) else []) + uploaded

    bill_on = document.get("billOn")
    if bill_on and not isinstance(bill_on, str):
        bill_on = json.dumps(bill_on, ensure_ascii=False)
    app = create_application(
        db,
        user_email=user_email,
        type=type,
        data=document,
        bill_on=bill_on or None,
    )
    logger.info("Application %s (%s) submitted by %s", app.id, type, user_email)
    return {"id": app.id}


def list_user_applications(db: Session, user_email: str | None):
    if not user_email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userEmail is required")
    return list_applications_by_user(db, user_email)


def cancel_user_application(db: Session, application_id: int, user_email: str):
    if cancel_application(db, application_id, user_email):
        logger.info("Application %s cancelled by %s", application_id, user_email)
        return {"message": "Application cancelled successfully"}

    app = get_user_application(db, application_id, user_email)
    if not app:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
    if app.status == WorkflowStatus.COMPLETED.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot cancel a completed application")
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Application changed while cancelling")
