"""Errores de negocio del almacén de antibióticos."""

from __future__ import annotations

from typing import Any


class StockError(Exception):
    """Base exception; `extra` viaja tal cual en el cuerpo de la respuesta."""

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra


class ValidationError(StockError):
    """Entrada mal formada (enteros inválidos, campos ausentes)."""


class NotFoundError(StockError):
    """Código de antibiótico o id de antibiograma desconocido."""


class InsufficientStockError(StockError):
    """La operación dejaría alguna cantidad en negativo."""


class NoLinkedItemsError(StockError):
    """El antibiograma no tiene antibióticos asignados."""


class DanglingReferenceError(StockError):
    """Una asignación apunta a un antibiótico que ya no existe."""


class InternalError(StockError):
    """Fallo inesperado del almacenamiento; el detalle sólo va al log."""
