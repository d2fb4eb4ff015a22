from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from almacen.app.api.deps import get_db, get_notifier
from almacen.app.db.models.stock import Antibiotic
from almacen.app.schemas.antibiotic import (
    AntibioticItemResponse,
    AntibioticRead,
    AntibioticUpdate,
    SubtractRequest,
)
from almacen.services.notifier import LowStockNotifier, below_minimum_rows
from almacen.services.stock import list_below_minimum, subtract_stock, update_antibiotic

router = APIRouter(prefix="/antibioticos")


@router.get("", response_model=list[AntibioticRead])
def list_antibiotics(db: Session = Depends(get_db)):
    return db.execute(select(Antibiotic).order_by(Antibiotic.name)).scalars().all()


@router.get("/bajo_minimo", response_model=list[AntibioticRead])
def list_low_stock(db: Session = Depends(get_db)):
    return list_below_minimum(db)


@router.put("/{code}", response_model=AntibioticItemResponse)
def update_antibiotic_endpoint(
    code: str,
    payload: AntibioticUpdate,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: LowStockNotifier = Depends(get_notifier),
):
    item = update_antibiotic(db, code, payload)
    rows = below_minimum_rows([item])
    if rows:
        background.add_task(notifier.notify, rows)
    return {"ok": True, "item": item}


@router.post("/{code}/restar", response_model=AntibioticItemResponse)
def subtract_endpoint(
    code: str,
    payload: SubtractRequest,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: LowStockNotifier = Depends(get_notifier),
):
    item = subtract_stock(db, code, payload.quantity)
    rows = below_minimum_rows([item])
    if rows:
        background.add_task(notifier.notify, rows)
    return {"ok": True, "item": item}
