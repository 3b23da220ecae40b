from sqlalchemy import text
from portal.core.db import Store


def read_health(store: Store):
    store.execute(text("SELECT 1"))
    return {"status": "ok", "backend": store.name}
