from __future__ import annotations

import os
import shutil
from pathlib import Path

import pytest

# Set env before any receipts_tracker imports (settings/engine are created at import time).
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///./.receipts_test.db")
os.environ.setdefault("STORAGE_ROOT", ".tmp_storage_test")


@pytest.fixture(autouse=True)
def _reset_db_and_storage() -> None:
    import receipts_tracker.models  # noqa: F401
    from receipts_tracker.core.db import engine
    from receipts_tracker.core.models import Base

    # Reset storage cache and directory
    import receipts_tracker.core.storage as storage_mod

    storage_mod._storage = None

    storage_path = Path(os.environ["STORAGE_ROOT"])
    if storage_path.exists():
        shutil.rmtree(storage_path)

    # Reset DB schema
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    yield


@pytest.fixture()
def session():
    from receipts_tracker.core.db import SessionLocal

    with SessionLocal() as session:
        yield session


@pytest.fixture()
def drop_table():
    """Drop one table so the next statement touching it fails."""
    from receipts_tracker.core.db import engine
    from receipts_tracker.core.models import Base

    def _drop(name: str) -> None:
        Base.metadata.tables[name].drop(engine)

    return _drop
