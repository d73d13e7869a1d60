from __future__ import annotations

import hashlib
from collections.abc import Iterable

from receipts_tracker.core.config import settings
from receipts_tracker.modules.receipts.errors import EmptyContent


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def file_extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def is_allowed_extension(filename: str, allowed: Iterable[str] | None = None) -> bool:
    if "." not in filename:
        return False
    if allowed is None:
        allowed = settings.allowed_extensions
    return file_extension(filename) in {ext.lower() for ext in allowed}


def address_for(body: bytes, original_filename: str) -> str:
    """Content address for an upload: `<sha256 hex>.<lowercased extension>`.

    The separator dot is kept even when the original name has no extension.
    """
    if not body:
        raise EmptyContent()
    return f"{_sha256_hex(body)}.{file_extension(original_filename)}"
