from __future__ import annotations

from typing import Generator

from almacen.app.db.session import SessionLocal
from almacen.services.notifier import LowStockNotifier


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_notifier() -> LowStockNotifier:
    return LowStockNotifier()
