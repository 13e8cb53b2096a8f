"""case-insensitive brand and guitar uniqueness, positive price check

Revision ID: 9c1f5e3a7b20
Revises: 4b7e2c91d0a3
Create Date: 2026-10-17 14:03:27.904611

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "9c1f5e3a7b20"
down_revision: str | None = "4b7e2c91d0a3"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.drop_index(op.f("ix_brands_name"), table_name="brands")
    op.create_index(op.f("ix_brands_name"), "brands", ["name"], unique=False)
    op.create_index("uq_brands_name_lower", "brands", [sa.text("lower(name)")], unique=True)

    op.drop_constraint("uq_guitar_user_model_brand", "guitars", type_="unique")
    op.create_index(
        "uq_guitar_user_model_brand",
        "guitars",
        ["user_id", sa.text("lower(model)"), "brand_id"],
        unique=True,
    )
    op.create_check_constraint("ck_guitars_price_positive", "guitars", "price > 0")


def downgrade() -> None:
    op.drop_constraint("ck_guitars_price_positive", "guitars", type_="check")
    op.drop_index("uq_guitar_user_model_brand", table_name="guitars")
    op.create_unique_constraint(
        "uq_guitar_user_model_brand", "guitars", ["user_id", "model", "brand_id"]
    )

    op.drop_index("uq_brands_name_lower", table_name="brands")
    op.drop_index(op.f("ix_brands_name"), table_name="brands")
    op.create_index(op.f("ix_brands_name"), "brands", ["name"], unique=True)
