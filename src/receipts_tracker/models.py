"""
Alembic model import hook.

Importing this module ensures all SQLAlchemy models are registered on Base.metadata.
"""

from __future__ import annotations

from receipts_tracker.modules.receipts.models import (  # noqa: F401
    Receipt,
    ReceiptTagAssociation,
    Tag,
)
