from __future__ import annotations

import logging

from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from almacen.app.db.models.stock import Antibiotic, AntibiogramPanel, panel_antibiotic
from almacen.app.db.session import SessionLocal

logger = logging.getLogger(__name__)

# (codigo, nombre, cantidad, stock_minimo)
DEMO_ANTIBIOTICS = [
    ("AMX", "Amoxicilina", 40, 10),
    ("AMC", "Amoxicilina/Ác. clavulánico", 30, 10),
    ("CIP", "Ciprofloxacino", 25, 8),
    ("CRO", "Ceftriaxona", 20, 8),
    ("GEN", "Gentamicina", 15, 5),
    ("SXT", "Trimetoprim/Sulfametoxazol", 12, 5),
]

DEMO_PANELS = {
    "Urocultivo": ["AMX", "AMC", "CIP", "SXT"],
    "Hemocultivo": ["CRO", "GEN", "CIP"],
}


def run_seed(db: Session) -> None:
    """Catálogo de demo. Idempotente: sólo crea lo que falta."""
    for code, name, qty, minimum in DEMO_ANTIBIOTICS:
        if db.get(Antibiotic, code) is None:
            db.add(Antibiotic(code=code, name=name, quantity=qty, minimum_threshold=minimum))
    db.flush()

    for panel_name, codes in DEMO_PANELS.items():
        panel = db.scalar(select(AntibiogramPanel).where(AntibiogramPanel.name == panel_name))
        if panel:
            continue
        panel = AntibiogramPanel(name=panel_name)
        db.add(panel)
        db.flush()
        for code in codes:
            db.execute(insert(panel_antibiotic).values(antibiograma_id=panel.id, antibiotico_codigo=code))

    db.commit()
    logger.info("SEED OK: %s antibióticos, %s antibiogramas", len(DEMO_ANTIBIOTICS), len(DEMO_PANELS))


def main() -> None:
    db = SessionLocal()
    try:
        run_seed(db)
    finally:
        db.close()


if __name__ == "__main__":
    from almacen.app.core.logging_config import configure_logging

    configure_logging()
    main()
