"""create receipt, tag and receipt_tag_association tables

Revision ID: 3b1f0c2d9a7e
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3b1f0c2d9a7e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "receipt",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("filename", sa.String(), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("ocr_text", sa.String(), nullable=True),
        sa.UniqueConstraint("filename"),
    )
    op.create_table(
        "tag",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("tag", sa.String(), nullable=True),
        sa.UniqueConstraint("tag"),
    )
    op.create_table(
        "receipt_tag_association",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("receipt_id", sa.Integer(), sa.ForeignKey("receipt.id"), nullable=True),
        sa.Column("tag_id", sa.Integer(), sa.ForeignKey("tag.id"), nullable=True),
        sa.UniqueConstraint("receipt_id", "tag_id", name="uq_receipt_tag_association"),
    )


def downgrade() -> None:
    op.drop_table("receipt_tag_association")
    op.drop_table("tag")
    op.drop_table("receipt")
