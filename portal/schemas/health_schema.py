from pydantic import BaseModel
from typing import Optional


class HealthStatus(BaseModel):
    status: str
    backend: Optional[str] = None
