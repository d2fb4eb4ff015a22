"""
Salidas de antibiogramas.

Registrar una salida de N antibiogramas descuenta N unidades de CADA
antibiótico asignado al antibiograma. Toda la lógica de bloqueo y
verificación de stock vive aquí; los endpoints sólo traducen HTTP.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from almacen.app.db.models.stock import Antibiotic, AntibiogramPanel, panel_antibiotic
from almacen.services.exceptions import (
    DanglingReferenceError,
    InsufficientStockError,
    NoLinkedItemsError,
    ValidationError,
)
from almacen.services.stock import require_positive_int
from almacen.services.uow import unit_of_work

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    panel_id: int
    units: int
    affected: list[Antibiotic] = field(default_factory=list)


def linked_codes(db: Session, panel_id: int) -> list[str]:
    """Conjunto (sin repetidos, ordenado) de códigos asignados al antibiograma."""
    rows = db.execute(
        select(panel_antibiotic.c.antibiotico_codigo)
        .where(panel_antibiotic.c.antibiograma_id == panel_id)
        .distinct()
    ).scalars()
    return sorted(rows)


def _shortfall(rows, units: int) -> list[dict]:
    return [
        {
            "code": row.code,
            "name": row.name,
            "quantity": row.quantity,
            "required": units,
        }
        for row in rows
        if row.quantity < units
    ]


def register_dispatch(db: Session, *, panel_id: int, units: int) -> DispatchResult:
    """
    Descuenta `units` de todos los antibióticos asignados a `panel_id`.

    Propiedades:
    - todo o nada: o se descuentan TODOS o ninguno
    - bloqueo SQL (FOR UPDATE) sobre exactamente las filas asignadas,
      tomado en orden de código
    - nunca deja cantidades negativas: el descuento es un UPDATE
      condicional, también donde FOR UPDATE no bloquea
    - sin reintentos: un fallo hace rollback y se propaga
    """
    panel_id = require_positive_int(panel_id, "antibiograma_id")
    units = require_positive_int(units, "unidades")

    with unit_of_work(db, operation="POST /api/salidas"):
        if db.get(AntibiogramPanel, panel_id) is None:
            raise ValidationError("antibiograma inexistente")

        codes = linked_codes(db, panel_id)
        if not codes:
            raise NoLinkedItemsError("Ese antibiograma no tiene antibióticos asignados")

        # ---------- LOCK ----------
        locked = list(
            db.execute(
                select(Antibiotic)
                .where(Antibiotic.code.in_(codes))
                .order_by(Antibiotic.code)
                .with_for_update()
            ).scalars()
        )

        if len(locked) != len(codes):
            missing = sorted(set(codes) - {row.code for row in locked})
            raise DanglingReferenceError(
                "Hay antibióticos asignados que no existen en la tabla antibioticos",
                missing=missing,
            )

        # ---------- CHECK ----------
        shortfall = _shortfall(locked, units)
        if shortfall:
            raise InsufficientStockError("Stock insuficiente", shortfall=shortfall)

        # ---------- APPLY ----------
        # misma cantidad para cada antibiótico (1 unidad por antibiograma).
        # Relativo y condicional: sin FOR UPDATE (SQLite) otra salida pudo
        # descontar entre el CHECK y aquí.
        applied = db.execute(
            update(Antibiotic)
            .where(Antibiotic.code.in_(codes))
            .where(Antibiotic.quantity >= units)
            .values(quantity=Antibiotic.quantity - units)
            .execution_options(synchronize_session=False)
        )
        if applied.rowcount != len(codes):
            current = db.execute(
                select(Antibiotic)
                .where(Antibiotic.code.in_(codes))
                .order_by(Antibiotic.code)
                .execution_options(populate_existing=True)
            ).scalars()
            raise InsufficientStockError(
                "Stock insuficiente", shortfall=_shortfall(current, units)
            )

        affected = list(
            db.execute(
                select(Antibiotic)
                .where(Antibiotic.code.in_(codes))
                .order_by(Antibiotic.name)
                .execution_options(populate_existing=True)
            ).scalars()
        )

    logger.info(
        "salida antibiograma=%s unidades=%s afectados=%s",
        panel_id,
        units,
        [row.code for row in affected],
    )
    return DispatchResult(panel_id=panel_id, units=units, affected=affected)
