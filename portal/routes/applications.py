from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session
from portal.core.db import get_db
from portal.controllers.application_controller import (
    submit_application,
    list_user_applications,
    cancel_user_application,
)
from portal.schemas.application_schema import (
    ApplicationCreated,
    ApplicationRead,
    CancelRequest,
    MessageResponse,
)

router = APIRouter(prefix="/api", tags=["applications"])


@router.post("/submit-form", response_model=ApplicationCreated)
def submit_form_route(
    user_email: str | None = Form(default=None, alias="userEmail"),
    type: str | None = Form(default=None),
    data: str | None = Form(default=None),
    attachments: list[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
):
    return submit_application(db, user_email, type, data, attachments)


@router.get("/applications", response_model=list[ApplicationRead])
def list_applications_route(
    user_email: str | None = Query(default=None, alias="userEmail"),
    db: Session = Depends(get_db),
):
    return list_user_applications(db, user_email)


@router.post("/cancel-application", response_model=MessageResponse)
def cancel_application_route(payload: CancelRequest, db: Session = Depends(get_db)):
    return cancel_user_application(db, payload.application_id, payload.user_email)
