from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from almacen.app.api.deps import get_db, get_notifier
from almacen.app.schemas.panel import DispatchCreate, DispatchRead
from almacen.services.dispatch import register_dispatch
from almacen.services.notifier import LowStockNotifier, below_minimum_rows

router = APIRouter(prefix="/salidas")


@router.post("", response_model=DispatchRead)
def create_dispatch(
    payload: DispatchCreate,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: LowStockNotifier = Depends(get_notifier),
):
    """
    Registrar una salida de N antibiogramas.

    Descuenta automáticamente el stock de los antibióticos asignados
    (todo o nada). 409 si falta stock en alguno.
    """
    result = register_dispatch(db, panel_id=payload.panel_id, units=payload.units)

    rows = below_minimum_rows(result.affected)
    if rows:
        background.add_task(notifier.notify, rows)

    return {
        "ok": True,
        "panel_id": result.panel_id,
        "units": result.units,
        "affected": result.affected,
    }
