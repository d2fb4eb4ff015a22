from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, inspect, select
from sqlalchemy.orm import Session

from almacen.app.api.deps import get_db

router = APIRouter()
api_router = APIRouter()


@router.get("/health")
def health():
    return {"ok": True}


@api_router.get("/dbcheck")
def db_check(db: Session = Depends(get_db)):
    """Diagnóstico: hora del servidor de BD y tablas visibles."""
    now = db.execute(select(func.current_timestamp())).scalar_one()
    tables = sorted(inspect(db.connection()).get_table_names())
    return {"ok": True, "now": now, "tables": tables}
