from __future__ import annotations

# isort: off
import receipts_tracker.models  # noqa: F401
# isort: on

from receipts_tracker.core.config import settings
from receipts_tracker.core.db import engine
from receipts_tracker.core.logging import get_logger, log_event
from receipts_tracker.core.models import Base
from receipts_tracker.core.storage import get_storage

logger = get_logger(__name__)


def bootstrap() -> None:
    if settings.environment in {"dev", "test"} and str(settings.database_url).startswith("sqlite"):
        Base.metadata.create_all(engine)

    storage = get_storage()
    log_event(
        logger,
        "app.bootstrap",
        environment=settings.environment,
        upload_root=str(getattr(storage, "root", settings.upload_path)),
    )
