from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from portal.core.db import Store, get_db, get_store
from portal.controllers.auth_controller import login_or_register
from portal.schemas.user_schema import UserLogin, UserRead

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login", response_model=UserRead)
def login_route(payload: UserLogin, db: Session = Depends(get_db), store: Store = Depends(get_store)):
    return login_or_register(db, store, payload)
