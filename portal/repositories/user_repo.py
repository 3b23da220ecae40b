from sqlalchemy.orm import Session
from sqlalchemy import select
from portal.core.db import Store
from portal.models.user_model import User


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == email)
    return db.execute(stmt).scalars().first()


def upsert_user(db: Session, store: Store, full_name: str | None, phone_number: str | None, email: str) -> User:
    store.insert_if_absent(
        db,
        User.__table__,
        {"fullName": full_name, "phoneNumber": phone_number, "email": email},
        index_elements=["email"],
        update_columns=["fullName"],
    )
    db.commit()
    return get_user_by_email(db, email)
