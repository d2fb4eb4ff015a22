from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from almacen.app.db.models.stock import Antibiotic
from almacen.app.schemas.antibiotic import AntibioticUpdate
from almacen.services.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from almacen.services.uow import unit_of_work

logger = logging.getLogger(__name__)


def require_positive_int(value, field: str) -> int:
    # bool es subclase de int: True no es una cantidad
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field} debe ser un entero > 0")
    return value


def require_code(code: str | None) -> str:
    code = (code or "").strip()
    if not code:
        raise ValidationError("Falta codigo")
    return code


def snapshot(row: Antibiotic) -> dict:
    return {
        "code": row.code,
        "name": row.name,
        "quantity": row.quantity,
        "minimum_threshold": row.minimum_threshold,
    }


def update_antibiotic(db: Session, code: str, payload: AntibioticUpdate) -> Antibiotic:
    """
    Actualiza cantidad y/o stock mínimo de un antibiótico.

    Sólo los campos presentes en `payload`; al menos uno es obligatorio.
    """
    code = require_code(code)
    changes = payload.changes()
    if not changes:
        raise ValidationError("Nada que actualizar")

    with unit_of_work(db, operation=f"PUT /api/antibioticos/{code}"):
        item = db.get(Antibiotic, code, with_for_update=True)
        if item is None:
            raise NotFoundError("Antibiótico no encontrado")

        for field, value in changes.items():
            setattr(item, field, value)
        db.flush()

    return item


def subtract_stock(db: Session, code: str, amount: int) -> Antibiotic:
    """
    Resta `amount` unidades sin permitir negativos.

    El descuento es UNA sentencia condicional (WHERE cantidad >= amount),
    así que dos restas concurrentes nunca pasan ambas. La lectura posterior
    sólo distingue "no existe" de "stock insuficiente".
    """
    code = require_code(code)
    amount = require_positive_int(amount, "cantidad")

    with unit_of_work(db, operation=f"POST /api/antibioticos/{code}/restar"):
        item = db.execute(
            update(Antibiotic)
            .where(Antibiotic.code == code)
            .where(Antibiotic.quantity >= amount)
            .values(quantity=Antibiotic.quantity - amount)
            .returning(Antibiotic)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if item is None:
            current = db.get(Antibiotic, code)
            if current is None:
                raise NotFoundError("Antibiótico no encontrado")
            raise InsufficientStockError("Stock insuficiente", item=snapshot(current))

    logger.info("restar %s: -%s -> %s", code, amount, item.quantity)
    return item


def list_below_minimum(db: Session) -> list[Antibiotic]:
    return list(
        db.execute(
            select(Antibiotic)
            .where(Antibiotic.quantity < Antibiotic.minimum_threshold)
            .order_by(Antibiotic.name)
        ).scalars()
    )
