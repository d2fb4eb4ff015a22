from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from almacen.app.api.deps import get_db, get_notifier
from almacen.services.notifier import LowStockNotifier, below_minimum_rows
from almacen.services.stock import list_below_minimum

router = APIRouter(prefix="/alertas")


@router.post("/stock_minimo")
def send_low_stock_alert(
    db: Session = Depends(get_db),
    notifier: LowStockNotifier = Depends(get_notifier),
):
    """Envía ahora el aviso con todo lo que está por debajo del mínimo."""
    rows = below_minimum_rows(list_below_minimum(db))
    result = notifier.notify(rows)
    return {
        "ok": result.ok,
        "status": result.status.value,
        "count": len(rows),
        "message_id": result.message_id,
        "reason": result.reason,
        "error": result.error,
    }
