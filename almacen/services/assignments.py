from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from almacen.app.db.models.stock import Antibiotic, AntibiogramPanel, panel_antibiotic
from almacen.services.exceptions import NotFoundError, ValidationError
from almacen.services.stock import require_positive_int
from almacen.services.uow import unit_of_work

logger = logging.getLogger(__name__)


def replace_links(db: Session, panel_id: int, codes: Sequence[str]) -> int:
    """
    Reemplaza TODAS las asignaciones de un antibiograma.

    Una sola transacción: borrar todo + insertar cada código. Si algo falla
    las asignaciones previas quedan intactas.

    Los códigos se guardan tal cual: sin normalizar y sin deduplicar.
    Devuelve el número de filas guardadas.
    """
    panel_id = require_positive_int(panel_id, "id")
    codes = list(codes)
    if any(not isinstance(c, str) or not c.strip() for c in codes):
        raise ValidationError("codes no puede contener códigos vacíos")
    padded = [c for c in codes if c != c.strip()]
    if padded:
        raise ValidationError("códigos con espacios al inicio o al final", codes=padded)

    with unit_of_work(db, operation=f"PUT /api/antibiogramas/{panel_id}/antibioticos"):
        if db.get(AntibiogramPanel, panel_id) is None:
            raise NotFoundError("Antibiograma no encontrado")

        if codes:
            known = set(
                db.execute(
                    select(Antibiotic.code).where(Antibiotic.code.in_(sorted(set(codes))))
                ).scalars()
            )
            missing = sorted(set(codes) - known)
            if missing:
                raise NotFoundError("Antibióticos no encontrados", missing=missing)

        db.execute(delete(panel_antibiotic).where(panel_antibiotic.c.antibiograma_id == panel_id))
        for code in codes:
            db.execute(
                insert(panel_antibiotic).values(antibiograma_id=panel_id, antibiotico_codigo=code)
            )

    logger.info("antibiograma %s: %s asignaciones guardadas", panel_id, len(codes))
    return len(codes)
