"""add antibioticos nonneg constraints

Revision ID: 8d41f3b6e2a0
Revises: 5b2e0c7a91d4
Create Date: 2026-03-02
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8d41f3b6e2a0"
down_revision: Union[str, Sequence[str], None] = "5b2e0c7a91d4"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE_NAME = "antibioticos"

CK_CANTIDAD = "ck_antibioticos_cantidad_nonneg"
CK_STOCK_MINIMO = "ck_antibioticos_stock_minimo_nonneg"


def _add_check_if_missing(constraint_name: str, check_sql: str) -> None:
    # Idempotent Postgres
    op.execute(
        f"""
        DO $$
        BEGIN
            IF NOT EXISTS (
                SELECT 1
                FROM pg_constraint c
                JOIN pg_class t ON t.oid = c.conrelid
                WHERE t.relname = '{TABLE_NAME}'
                  AND c.conname = '{constraint_name}'
            ) THEN
                ALTER TABLE {TABLE_NAME}
                ADD CONSTRAINT {constraint_name}
                CHECK ({check_sql});
            END IF;
        END $$;
        """
    )


def upgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        # SQLite no admite ALTER TABLE ADD CONSTRAINT; allí los checks los crea
        # 5b2e0c7a91d4 junto con la tabla.
        return

    # Datos heredados: sin este UPDATE la migración fallaría sobre filas negativas.
    op.execute(f"UPDATE {TABLE_NAME} SET cantidad = 0 WHERE cantidad < 0;")
    op.execute(f"UPDATE {TABLE_NAME} SET stock_minimo = 0 WHERE stock_minimo < 0;")

    _add_check_if_missing(CK_CANTIDAD, "cantidad >= 0")
    _add_check_if_missing(CK_STOCK_MINIMO, "stock_minimo >= 0")


def downgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute(f"ALTER TABLE {TABLE_NAME} DROP CONSTRAINT IF EXISTS {CK_STOCK_MINIMO};")
    op.execute(f"ALTER TABLE {TABLE_NAME} DROP CONSTRAINT IF EXISTS {CK_CANTIDAD};")
