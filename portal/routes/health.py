from fastapi import APIRouter, Depends
from portal.core.db import Store, get_store
from portal.controllers.health_controller import read_health
from portal.schemas.health_schema import HealthStatus

router = APIRouter()


@router.get("/health", response_model=HealthStatus)
def health(store: Store = Depends(get_store)):
    return read_health(store)
