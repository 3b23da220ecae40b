from typing import Any
from sqlalchemy.orm import Session
from sqlalchemy import select, update, func, or_, cast, Text
from portal.models.application_model import Application
from portal.models.enums import WorkflowStatus, PaymentStatus


def create_application(
    db: Session,
    user_email: str,
    type: str,
    data: dict[str, Any],
    bill_on: str | None = None,
) -> Application:
    app = Application(
        user_email=user_email,
        type=type,
        data=data,
        status=WorkflowStatus.PENDING.value,
        payment_status=PaymentStatus.UNPAID.value,
        bill_on=bill_on,
    )
    db.add(app)
    db.commit()
    db.refresh(app)
    return app


def get_application_by_id(db: Session, application_id: int) -> Application | None:
    stmt = select(Application).where(Application.id == application_id)
    return db.execute(stmt).scalars().first()


def get_user_application(db: Session, application_id: int, user_email: str) -> Application | None:
    stmt = select(Application).where(Application.id == application_id, Application.user_email == user_email)
    return db.execute(stmt).scalars().first()


def list_applications_by_user(db: Session, user_email: str) -> list[Application]:
    stmt = (
        select(Application)
        .where(Application.user_email == user_email)
        .order_by(Application.submission_time.desc(), Application.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def _search_filter(search: str):
    return or_(
        Application.user_email.icontains(search, autoescape=True),
        Application.type.icontains(search, autoescape=True),
        cast(Application.data, Text).icontains(search, autoescape=True),
    )


def search_applications(db: Session, search: str, offset: int, limit: int) -> tuple[list[Application], int]:
    count_stmt = select(func.count()).select_from(Application)
    data_stmt = select(Application)
    if search:
        criteria = _search_filter(search)
        count_stmt = count_stmt.where(criteria)
        data_stmt = data_stmt.where(criteria)
    data_stmt = (
        data_stmt.order_by(Application.submission_time.desc(), Application.id.desc())
        .offset(offset)
        .limit(limit)
    )
    total = db.execute(count_stmt).scalar_one()
    return list(db.execute(data_stmt).scalars().all()), total


def cancel_application(db: Session, application_id: int, user_email: str) -> int:
    stmt = (
        update(Application)
        .where(
            Application.id == application_id,
            Application.user_email == user_email,
            or_(Application.status.is_(None), Application.status != WorkflowStatus.COMPLETED.value),
        )
        .values(status=WorkflowStatus.CANCELLED.value)
    )
    rowcount = db.execute(stmt).rowcount
    db.commit()
    return rowcount


def update_application_fields(db: Session, application_id: int, **values) -> int:
    stmt = update(Application).where(Application.id == application_id).values(**values)
    rowcount = db.execute(stmt).rowcount
    db.commit()
    return rowcount
