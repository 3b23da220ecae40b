import logging
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from portal.core.db import Store
from portal.schemas.user_schema import UserLogin
from portal.repositories.user_repo import upsert_user

logger = logging.getLogger(__name__)


def login_or_register(db: Session, store: Store, data: UserLogin):
    email = (data.email or "").strip()
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="email is required")
    # One INSERT ... ON CONFLICT statement, so two first logins for the same
    # email cannot create two rows.
    user = upsert_user(db, store, data.full_name, data.phone_number, email)
    logger.info("Login for user %s (id=%s)", email, user.id)
    return user
