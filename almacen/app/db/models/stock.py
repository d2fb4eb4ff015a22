from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
)
from sqlalchemy.orm import Mapped, mapped_column

from almacen.app.db.base import Base

# ---------- ASSIGNMENTS ----------
# Sin clave primaria: el reemplazo completo inserta los códigos tal cual,
# duplicados incluidos.
panel_antibiotic = Table(
    "antibiograma_antibiotico",
    Base.metadata,
    Column(
        "antibiograma_id",
        BigInteger().with_variant(Integer, "sqlite"),
        ForeignKey("antibiogramas.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "antibiotico_codigo",
        String(64),
        ForeignKey("antibioticos.codigo", ondelete="RESTRICT"),
        nullable=False,
    ),
    Index("ix_antibiograma_antibiotico_panel", "antibiograma_id"),
)


# ---------- MASTER DATA ----------
class Antibiotic(Base):
    __tablename__ = "antibioticos"

    code: Mapped[str] = mapped_column("codigo", String(64), primary_key=True)
    name: Mapped[str] = mapped_column("nombre", String(255), nullable=False)
    quantity: Mapped[int] = mapped_column("cantidad", Integer, default=0, nullable=False)
    minimum_threshold: Mapped[int] = mapped_column("stock_minimo", Integer, default=0, nullable=False)

    __table_args__ = (
        CheckConstraint("cantidad >= 0", name="ck_antibioticos_cantidad_nonneg"),
        CheckConstraint("stock_minimo >= 0", name="ck_antibioticos_stock_minimo_nonneg"),
    )

    @property
    def below_minimum(self) -> bool:
        return self.quantity < self.minimum_threshold


class AntibiogramPanel(Base):
    __tablename__ = "antibiogramas"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    name: Mapped[str] = mapped_column("nombre", String(255), nullable=False)
