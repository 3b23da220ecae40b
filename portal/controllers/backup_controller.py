import os
import json
import logging
from datetime import datetime, timezone
from sqlalchemy import DateTime, Table, select
from sqlalchemy.exc import SQLAlchemyError
from portal.core.db import Store
from portal.models.user_model import User
from portal.models.application_model import Application
from portal.models.enums import WorkflowStatus, PaymentStatus

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "backup_"


def _prune_backups(backup_dir: str, keep: int) -> list[str]:
    files = [
        os.path.join(backup_dir, f)
        for f in os.listdir(backup_dir)
        if f.startswith(BACKUP_PREFIX) and f.endswith(".json")
    ]
    files.sort(key=lambda p: (os.path.getmtime(p), p), reverse=True)
    removed = []
    for path in files[keep:]:
        os.remove(path)
        removed.append(path)
        logger.info("Deleted old backup %s", os.path.basename(path))
    return removed


def run_backup(store: Store | None, backup_dir: str, keep: int = 365) -> str | None:
    """Write a JSON snapshot of users and applications.

    Best effort: failures are logged and the next scheduled run tries again.
    Returns the written path, or None on failure.
    """
    if store is None:
        logger.warning("Skipping backup: no database store is connected")
        return None
    try:
        users = store.execute(select(User.__table__)).rows
        applications = store.execute(select(Application.__table__)).rows

        os.makedirs(backup_dir, exist_ok=True)
        ts = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        path = os.path.join(backup_dir, f"{BACKUP_PREFIX}{ts}.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(
                {"backend": store.name, "users": users, "applications": applications},
                f,
                default=str,
                ensure_ascii=False,
            )
        logger.info("Backup saved to %s (%d users, %d applications)", path, len(users), len(applications))
        _prune_backups(backup_dir, keep)
        return path
    except (SQLAlchemyError, OSError):
        logger.exception("Backup failed")
        return None


def _row_values(table: Table, row: dict, skip: tuple[str, ...] = ()) -> dict:
    values = {}
    for column in table.c:
        if column.name in skip or column.name not in row:
            continue
        value = row[column.name]
        if isinstance(value, str) and isinstance(column.type, DateTime):
            value = datetime.fromisoformat(value)
        values[column.name] = value
    return values


def restore_backup(store: Store, path: str) -> dict[str, int]:
    """Load a snapshot written by ``run_backup`` into ``store``.

    Users are matched on email and applications on id; existing rows are
    updated in place. Each row is committed on its own so one bad row does not
    stop the rest. Returns restored/failed/total counts.
    """
    with open(path, encoding="utf-8") as f:
        snapshot = json.load(f)

    users_table = User.__table__
    apps_table = Application.__table__
    restored = failed = 0
    rows = [("users", r) for r in snapshot.get("users", [])]
    rows += [("applications", r) for r in snapshot.get("applications", [])]

    db = store.session()
    try:
        for kind, row in rows:
            try:
                if kind == "users":
                    # Ids are reassigned; applications reference users by email.
                    values = _row_values(users_table, row, skip=("id",))
                    table, key = users_table, "email"
                else:
                    values = _row_values(apps_table, row)
                    values["paymentStatus"] = values.get("paymentStatus") or WorkflowStatus.PENDING.value
                    values["payment_status"] = values.get("payment_status") or PaymentStatus.UNPAID.value
                    table, key = apps_table, "id"
                store.insert_if_absent(
                    db,
                    table,
                    values,
                    index_elements=[key],
                    update_columns=[c for c in values if c != key],
                )
                db.commit()
                restored += 1
            except (SQLAlchemyError, ValueError) as exc:
                db.rollback()
                failed += 1
                logger.error("Could not restore %s row %s: %s", kind, row.get("id"), exc)

        store.reset_sequence(db, apps_table)
        db.commit()
    finally:
        db.close()

    logger.info("Restore of %s complete: %d restored, %d failed", path, restored, failed)
    return {"restored": restored, "failed": failed, "total": len(rows)}


if __name__ == "__main__":
    import argparse
    from portal.core.config import get_settings
    from portal.core.schema import connect_store

    parser = argparse.ArgumentParser(description="Restore a JSON backup into the configured database")
    parser.add_argument("path")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    target = connect_store(get_settings())
    if target is None:
        raise SystemExit("No database available")
    try:
        print(restore_backup(target, args.path))
    finally:
        target.dispose()
