from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from receipts_tracker.core.config import settings
from receipts_tracker.core.logging import get_logger, log_event, log_exception, monotonic_ms

logger = get_logger(__name__)


class StorageError(RuntimeError):
    pass


@dataclass(frozen=True)
class StoredObject:
    key: str
    byte_size: int
    created: bool


class ObjectStorage:
    def put(self, *, key: str, body: bytes) -> StoredObject:  # pragma: no cover
        raise NotImplementedError

    def exists(self, *, key: str) -> bool:  # pragma: no cover
        raise NotImplementedError


class LocalObjectStorage(ObjectStorage):
    """Files on local disk, written once per key.

    Keys are content addresses, so an existing file already holds the same
    bytes and is left untouched.
    """

    def __init__(self, root: Path):
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def put(self, *, key: str, body: bytes) -> StoredObject:
        start = time.monotonic()
        path = self._root / key
        opened = False
        try:
            with open(path, "xb") as fh:
                opened = True
                fh.write(body)
            os.chmod(path, 0o600)
        except FileExistsError:
            log_event(
                logger,
                "storage.put.exists",
                backend="local",
                storage_key=key,
                byte_size=len(body),
                duration_ms=monotonic_ms(start),
            )
            return StoredObject(key=key, byte_size=len(body), created=False)
        except OSError as e:
            log_exception(
                logger,
                "storage.put.failure",
                backend="local",
                storage_key=key,
                byte_size=len(body),
            )
            # A partial file would later pass as a stored copy of these bytes.
            if opened:
                try:
                    path.unlink(missing_ok=True)
                except OSError:
                    log_exception(
                        logger, "storage.put.cleanup.failure", backend="local", storage_key=key
                    )
            raise StorageError(f"Failed to write {key}") from e
        log_event(
            logger,
            "storage.put.success",
            backend="local",
            storage_key=key,
            byte_size=len(body),
            duration_ms=monotonic_ms(start),
        )
        return StoredObject(key=key, byte_size=len(body), created=True)

    def exists(self, *, key: str) -> bool:
        return (self._root / key).exists()


_storage: ObjectStorage | None = None


def _upload_root() -> Path:
    root = settings.upload_path
    if not root.is_absolute():
        root = Path(os.getcwd()) / root
    return root


def get_storage() -> ObjectStorage:
    global _storage  # noqa: PLW0603
    if _storage is not None:
        return _storage
    _storage = LocalObjectStorage(_upload_root())
    return _storage


def diagnose_storage(*, write_test: bool = False) -> dict[str, Any]:
    """
    Best-effort check that the upload directory exists and is writable.

    When write_test=True a small temporary file is written and removed again.
    """
    root = _upload_root()
    result: dict[str, Any] = {"ok": root.is_dir(), "backend": "local", "root": str(root)}
    if not write_test or not result["ok"]:
        return result

    probe = root / f".healthz-{time.time_ns()}"
    try:
        probe.write_bytes(b"ok")
        out = probe.read_bytes()
        probe.unlink()
    except OSError as e:
        result["ok"] = False
        result["error_type"] = type(e).__name__
        result["error"] = str(e)
        return result

    result["write_test"] = {"ok": out == b"ok"}
    if out != b"ok":
        result["ok"] = False
    return result
