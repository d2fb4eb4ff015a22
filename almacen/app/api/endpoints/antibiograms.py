from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from almacen.app.api.deps import get_db
from almacen.app.db.models.stock import Antibiotic, AntibiogramPanel, panel_antibiotic
from almacen.app.schemas.antibiotic import AntibioticRead
from almacen.app.schemas.panel import LinkReplace, LinkReplaceResult, PanelPresence, PanelRead
from almacen.services.assignments import replace_links
from almacen.services.exceptions import ValidationError

router = APIRouter(prefix="/antibiogramas")


@router.get("", response_model=list[PanelRead])
def list_panels(db: Session = Depends(get_db)):
    return db.execute(select(AntibiogramPanel).order_by(AntibiogramPanel.name)).scalars().all()


@router.get("/{panel_id}/existencias", response_model=list[PanelPresence])
def list_presence(panel_id: int, db: Session = Depends(get_db)):
    """Todos los antibióticos, marcando los asignados a este antibiograma."""
    assigned = (
        exists()
        .where(panel_antibiotic.c.antibiograma_id == panel_id)
        .where(panel_antibiotic.c.antibiotico_codigo == Antibiotic.code)
    )
    rows = db.execute(
        select(Antibiotic.code, Antibiotic.name, assigned.label("exists")).order_by(Antibiotic.name)
    ).all()
    return [{"code": code, "name": name, "exists": bool(flag)} for code, name, flag in rows]


@router.get("/{panel_id}/antibioticos", response_model=list[str])
def list_linked_codes(panel_id: int, db: Session = Depends(get_db)):
    return (
        db.execute(
            select(panel_antibiotic.c.antibiotico_codigo).where(
                panel_antibiotic.c.antibiograma_id == panel_id
            )
        )
        .scalars()
        .all()
    )


@router.get("/{panel_id}/antibioticos_detalle", response_model=list[AntibioticRead])
def list_linked_detail(panel_id: int, db: Session = Depends(get_db)):
    if panel_id <= 0:
        raise ValidationError("id inválido")

    stmt = (
        select(Antibiotic)
        .join(panel_antibiotic, panel_antibiotic.c.antibiotico_codigo == Antibiotic.code)
        .where(panel_antibiotic.c.antibiograma_id == panel_id)
        .order_by(Antibiotic.name)
    )
    return db.execute(stmt).scalars().all()


@router.put("/{panel_id}/antibioticos", response_model=LinkReplaceResult)
def put_linked_codes(panel_id: int, payload: LinkReplace, db: Session = Depends(get_db)):
    saved = replace_links(db, panel_id, payload.codes)
    return {"ok": True, "saved": saved}
