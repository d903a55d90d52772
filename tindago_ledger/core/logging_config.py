"""Logging bootstrap shared by the API process and maintenance scripts."""

from __future__ import annotations

import logging

from tindago_ledger.core.config import Settings, get_settings

_configured = False


def configure_logging(settings: Settings | None = None) -> None:
    global _configured
    if _configured:
        return
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else settings.logging.level.upper()
    logging.basicConfig(level=level, format=settings.logging.format)
    # engine echo already covers SQL statements when requested
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
