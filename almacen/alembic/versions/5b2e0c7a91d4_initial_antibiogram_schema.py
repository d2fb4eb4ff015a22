"""initial antibiogram schema

Revision ID: 5b2e0c7a91d4
Revises:
Create Date: 2026-03-02
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5b2e0c7a91d4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _has_table(name: str) -> bool:
    return sa.inspect(op.get_bind()).has_table(name)


def upgrade() -> None:
    # Las tablas de producción ya existían antes de Alembic: sólo se crean si faltan.
    if not _has_table("antibioticos"):
        op.create_table(
            "antibioticos",
            sa.Column("codigo", sa.String(64), primary_key=True),
            sa.Column("nombre", sa.String(255), nullable=False),
            sa.Column("cantidad", sa.Integer, nullable=False, server_default="0"),
            sa.Column("stock_minimo", sa.Integer, nullable=False, server_default="0"),
            sa.CheckConstraint("cantidad >= 0", name="ck_antibioticos_cantidad_nonneg"),
            sa.CheckConstraint("stock_minimo >= 0", name="ck_antibioticos_stock_minimo_nonneg"),
        )

    if not _has_table("antibiogramas"):
        op.create_table(
            "antibiogramas",
            sa.Column("id", sa.BigInteger().with_variant(sa.Integer, "sqlite"), primary_key=True),
            sa.Column("nombre", sa.String(255), nullable=False),
        )

    if not _has_table("antibiograma_antibiotico"):
        op.create_table(
            "antibiograma_antibiotico",
            sa.Column(
                "antibiograma_id",
                sa.BigInteger().with_variant(sa.Integer, "sqlite"),
                sa.ForeignKey("antibiogramas.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "antibiotico_codigo",
                sa.String(64),
                sa.ForeignKey("antibioticos.codigo", ondelete="RESTRICT"),
                nullable=False,
            ),
        )
        op.create_index(
            "ix_antibiograma_antibiotico_panel",
            "antibiograma_antibiotico",
            ["antibiograma_id"],
        )


def downgrade() -> None:
    op.drop_index("ix_antibiograma_antibiotico_panel", table_name="antibiograma_antibiotico")
    op.drop_table("antibiograma_antibiotico")
    op.drop_table("antibiogramas")
    op.drop_table("antibioticos")
