import os
import re
import logging
from datetime import datetime, timezone
from fastapi import UploadFile, HTTPException, status
from portal.core.config import get_settings

logger = logging.getLogger(__name__)


def _storage_name(root: str, original_name: str) -> str:
    safe_name = os.path.basename(original_name)
    safe_name = re.sub(r"[^A-Za-z0-9._-]", "_", safe_name)
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    name = f"{ts}_{safe_name}"
    n = 1
    while os.path.exists(os.path.join(root, name)):
        name = f"{ts}-{n}_{safe_name}"
        n += 1
    return name


def save_upload(upload: UploadFile) -> str:
    """Write an uploaded file to the upload directory and return its URL path.

    Files are never removed once written, even if the record that points to
    them is later overwritten or cancelled.
    """
    settings = get_settings()
    root = settings.upload_dir
    os.makedirs(root, exist_ok=True)

    storage_key = _storage_name(root, upload.filename or "file")
    full_path = os.path.join(root, storage_key)

    total = 0
    try:
        with open(full_path, "wb") as f:
            while True:
                chunk = upload.file.read(1024 * 1024)
                if not chunk:
                    break
                total += len(chunk)
                if total > settings.max_upload_bytes:
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=f"File exceeds max size {settings.max_upload_bytes} bytes",
                    )
                f.write(chunk)
    except Exception:
        if os.path.exists(full_path):
            os.remove(full_path)
        raise

    logger.info("Stored upload %s (%d bytes)", storage_key, total)
    return f"{settings.upload_url_prefix}/{storage_key}"
