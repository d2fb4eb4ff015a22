"""Aviso por email de antibióticos por debajo del stock mínimo.

Best-effort: nunca lanza, nunca bloquea la operación que lo dispara.
"""

from __future__ import annotations

import enum
import html
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Iterable, Mapping

from almacen.app.core.config import Settings, settings as default_settings
from almacen.services.stock import snapshot

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 15


class NotificationStatus(str, enum.Enum):
    sent = "SENT"
    skipped = "SKIPPED"
    failed = "FAILED"


@dataclass
class NotificationResult:
    status: NotificationStatus
    message_id: str | None = None
    reason: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is NotificationStatus.sent


def _render_html(rows: list[Mapping]) -> str:
    body = "".join(
        "<tr><td>{}</td><td>{}</td><td>{}</td><td>{}</td></tr>".format(
            html.escape(str(r.get("code", ""))),
            html.escape(str(r.get("name", ""))),
            r.get("quantity", ""),
            r.get("minimum_threshold", ""),
        )
        for r in rows
    )
    return (
        "<h2>Antibióticos por debajo del stock mínimo</h2>"
        '<table border="1" cellpadding="6" cellspacing="0">'
        "<thead><tr><th>Código</th><th>Nombre</th><th>Stock</th><th>Mínimo</th></tr></thead>"
        f"<tbody>{body}</tbody></table>"
        "<p>Generado por Almacén.</p>"
    )


def _render_text(rows: list[Mapping]) -> str:
    lines = ["Antibióticos por debajo del stock mínimo:", ""]
    for r in rows:
        lines.append(
            f"- {r.get('code')} {r.get('name')}: stock {r.get('quantity')} / mínimo {r.get('minimum_threshold')}"
        )
    return "\n".join(lines)


class LowStockNotifier:
    """Envía el resumen de stock bajo por SMTP."""

    def __init__(self, settings: Settings = default_settings):
        self.settings = settings

    def _connect(self) -> smtplib.SMTP:
        s = self.settings
        if s.smtp_secure:
            return smtplib.SMTP_SSL(s.smtp_host, s.smtp_port, timeout=SMTP_TIMEOUT_SECONDS)

        server = smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=SMTP_TIMEOUT_SECONDS)
        server.ehlo()
        if server.has_extn("starttls"):
            server.starttls()
            server.ehlo()
        return server

    def build_message(self, rows: list[Mapping]) -> EmailMessage:
        s = self.settings
        msg = EmailMessage()
        msg["Subject"] = f"Alerta stock mínimo ({len(rows)})"
        msg["From"] = s.smtp_from or s.smtp_user
        msg["To"] = s.alert_to_email
        msg["Message-ID"] = make_msgid(domain="almacen")
        msg.set_content(_render_text(rows))
        msg.add_alternative(_render_html(rows), subtype="html")
        return msg

    def notify(self, rows: Iterable[Mapping]) -> NotificationResult:
        rows = list(rows or [])
        if not rows:
            return NotificationResult(NotificationStatus.skipped, reason="no_rows")
        if not self.settings.mail_enabled:
            logger.info("[MAIL] Desactivado: faltan variables SMTP_* o ALERT_TO_EMAIL.")
            return NotificationResult(NotificationStatus.skipped, reason="missing_config")

        try:
            msg = self.build_message(rows)
            with self._connect() as server:
                server.login(self.settings.smtp_user, self.settings.smtp_pass)
                server.send_message(msg)
        except Exception as exc:  # el aviso nunca rompe al llamador
            logger.warning("[MAIL] Error (no bloquea): %s", exc)
            return NotificationResult(NotificationStatus.failed, error=str(exc))

        logger.info("[MAIL] Enviado: %s", msg["Message-ID"])
        return NotificationResult(NotificationStatus.sent, message_id=msg["Message-ID"])


def below_minimum_rows(items: Iterable) -> list[dict]:
    """Filas listas para `notify` de los antibióticos que quedaron bajo mínimo."""
    return [snapshot(item) for item in items if item.below_minimum]
