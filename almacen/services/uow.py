from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from almacen.services.exceptions import InternalError, StockError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, *, operation: str) -> Iterator[Session]:
    """
    Transacción explícita sobre la sesión de la petición.

    - commit si el bloque termina sin error
    - rollback ANTES de propagar cualquier error
    - los fallos de SQLAlchemy salen como InternalError (detalle en el log)
    """
    try:
        yield db
        db.commit()
    except StockError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("DB ERROR %s", operation)
        raise InternalError("Error interno de base de datos") from exc
    except Exception:
        db.rollback()
        raise
